"""
File names and tabular rows handed to the export collaborators (PDF, XLSX, PNG).
"""

from __future__ import annotations

import re

from invoice_builder.core.models.invoice import InvoiceRecord

SPREADSHEET_HEADER = ("Description", "Quantity", "Unit Price", "Total", "Currency")

_UNSAFE = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def _safe_part(value: str, fallback: str) -> str:
    cleaned = _UNSAFE.sub("_", (value or "").strip())
    return cleaned or fallback


def pdf_filename(record: InvoiceRecord) -> str:
    return f"Invoice_{_safe_part(record.client_name, 'Client')}.pdf"


def spreadsheet_filename(record: InvoiceRecord) -> str:
    return f"Invoice_{_safe_part(record.invoice_number, 'Record')}.xlsx"


def image_filename(record: InvoiceRecord) -> str:
    return f"Invoice_{_safe_part(record.invoice_number, 'Preview')}.png"


def spreadsheet_rows(record: InvoiceRecord) -> list[tuple]:
    rows: list[tuple] = [SPREADSHEET_HEADER]
    for item in record.items:
        rows.append((item.description, item.quantity, item.unit_price, item.amount, record.currency))
    return rows
