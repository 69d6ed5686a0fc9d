"""
Exception types raised by the invoice layout pipeline.
"""

from __future__ import annotations


class InvoiceBuilderError(Exception):
    """Base class for all invoice builder errors."""


class InvalidInvoiceError(InvoiceBuilderError, ValueError):
    """The invoice snapshot violates a structural invariant (e.g. duplicate item ids)."""


class LogoImageError(InvoiceBuilderError):
    """Logo image data could not be decoded."""


class PaymentCodeError(InvoiceBuilderError):
    """The payment QR code could not be generated."""
