from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from invoice_builder.core.models.invoice import InvoiceRecord
from invoice_builder.core.services.export_names import pdf_filename
from invoice_builder.core.services.settings import LayoutConfig
from invoice_builder.utils.pdf.renderers.pdf_renderer import render_pdf_bytes
from invoice_builder.utils.qr import PaymentCodeEncoder

logger = logging.getLogger(__name__)


def export_invoice_pdf(
    directory: Path,
    record: InvoiceRecord,
    config: Optional[LayoutConfig] = None,
    payment_codes: Optional[PaymentCodeEncoder] = None,
) -> Path:
    """
    Render and save `Invoice_<client>.pdf` into `directory`.
    The whole document is built in memory first and moved into place in one step,
    so a failed export leaves no file behind.
    """
    data = render_pdf_bytes(record, config, payment_codes)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / pdf_filename(record)
    partial = target.with_name(target.name + ".part")
    try:
        partial.write_bytes(data)
        partial.replace(target)
    except OSError:
        partial.unlink(missing_ok=True)
        raise
    logger.info("Invoice PDF written: %s (%d bytes)", target, len(data))
    return target
