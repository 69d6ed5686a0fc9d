from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from invoice_builder.core.models.invoice import InvoiceRecord
from invoice_builder.core.services.settings import LayoutConfig, load_layout_config
from invoice_builder.core.services.translations import labels
from invoice_builder.utils import qr
from invoice_builder.utils.pdf.core.builder import build_pdf_bytes
from invoice_builder.utils.pdf.core.canvas import LayoutContext, PageCanvas
from invoice_builder.utils.pdf.core.fonts import load_fonts
from invoice_builder.utils.pdf.core.layout_common import PARTY_GAP, PARTY_MIN_Y, TABLE_GAP, Flow, mm
from invoice_builder.utils.pdf.core.ops import Document
from invoice_builder.utils.pdf.sections.client import render_bill_to
from invoice_builder.utils.pdf.sections.footer import render_footer
from invoice_builder.utils.pdf.sections.header import select_header
from invoice_builder.utils.pdf.sections.items_table import render_items_table
from invoice_builder.utils.pdf.sections.notes import render_free_text
from invoice_builder.utils.pdf.sections.payment import render_payment
from invoice_builder.utils.pdf.sections.summary import render_totals
from invoice_builder.utils.qr import PaymentCodeEncoder

logger = logging.getLogger(__name__)


def render_document(
    record: InvoiceRecord,
    config: Optional[LayoutConfig] = None,
    payment_codes: Optional[PaymentCodeEncoder] = None,
) -> Document:
    """
    Lay out one invoice snapshot into pages of positioned draw ops.

    Every call builds its own canvas, fonts and logo cache; nothing survives between calls.
    Logo and payment-QR failures degrade to a skipped section, anything else propagates.
    """
    config = config or load_layout_config()
    margin = mm(config.margin_mm)
    canvas = PageCanvas(config.page_width, config.page_height, top_margin=margin, bottom_margin=mm(config.bottom_margin_mm))
    fonts = load_fonts(config)
    ctx = LayoutContext(
        record=record,
        totals=record.totals,
        flow=Flow(rtl=record.direction == "rtl", page_width=config.page_width, margin=margin),
        labels=labels(record.language),
        fonts=fonts,
        canvas=canvas,
        config=config,
        encode_payment_code=payment_codes or qr.encode,
    )

    header_bottom = select_header(record.template).render(ctx)
    party_top = max(header_bottom + PARTY_GAP, PARTY_MIN_Y)
    party_bottom = render_bill_to(ctx, party_top)
    canvas.y = max(party_top + TABLE_GAP, party_bottom + mm(8))
    render_items_table(ctx)
    render_totals(ctx)
    render_free_text(ctx)
    render_payment(ctx)
    render_footer(ctx)

    logger.info(
        "Invoice laid out: number=%r template=%s language=%s pages=%d",
        record.invoice_number,
        record.template,
        record.language,
        len(canvas.pages),
    )
    return Document(
        pages=canvas.pages,
        width=config.page_width,
        height=config.page_height,
        title=f"Invoice {record.invoice_number}".strip(),
        author=record.business_name or config.app_name,
        creator=config.app_name,
        fonts=fonts,
    )


def render_pdf_bytes(
    record: InvoiceRecord,
    config: Optional[LayoutConfig] = None,
    payment_codes: Optional[PaymentCodeEncoder] = None,
) -> bytes:
    return build_pdf_bytes(render_document(record, config, payment_codes))


def render_pdf(path: Path, record: InvoiceRecord, config: Optional[LayoutConfig] = None) -> None:
    path.write_bytes(render_pdf_bytes(record, config))
