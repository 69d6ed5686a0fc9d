"""
Payment QR codes. `encode` is the payment-code generator the layout engine calls;
it returns PNG bytes that are embedded like any other image.
"""

from __future__ import annotations

import io
import logging
from typing import Callable

import qrcode
from qrcode.exceptions import DataOverflowError

from invoice_builder.errors import PaymentCodeError

logger = logging.getLogger(__name__)

PaymentCodeEncoder = Callable[[str], bytes]


def encode(text: str) -> bytes:
    """Return a PNG of the QR code for `text`. Raises PaymentCodeError on empty or oversized payloads."""
    if not text or not text.strip():
        raise PaymentCodeError("Empty payment payload")
    try:
        qr = qrcode.QRCode(border=1, box_size=10, error_correction=qrcode.constants.ERROR_CORRECT_M)
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except (DataOverflowError, ValueError, OSError) as exc:
        raise PaymentCodeError(f"QR encoding failed: {exc}") from exc
    logger.debug("Encoded payment QR (%d bytes payload)", len(text))
    return buf.getvalue()


def payment_payload(bank_name: str, account_number: str, amount_due: str) -> str:
    return f"Payment to: {bank_name or ''} - Account: {account_number} - Amount: {amount_due}"
