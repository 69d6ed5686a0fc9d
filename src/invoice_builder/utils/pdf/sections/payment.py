from __future__ import annotations

import logging

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.images import load_image
from invoice_builder.utils.pdf.core.layout_common import (
    FONT_SIZES,
    QR_BLOCK_HEIGHT,
    QR_BOTTOM_RESERVE,
    QR_SIZE,
    color,
    mm,
)
from invoice_builder.utils.qr import payment_payload

logger = logging.getLogger(__name__)


def render_payment(ctx: LayoutContext) -> None:
    """
    Payment QR with caption. Requires show_qr_code and a non-blank account number;
    any encoding or decoding failure skips the section and is logged.
    """
    canvas, flow, record = ctx.canvas, ctx.flow, ctx.record
    if not (record.show_qr_code and record.account_number.strip()):
        return

    amount_due = ctx.money(ctx.totals.total)
    try:
        png = ctx.encode_payment_code(payment_payload(record.bank_name, record.account_number, amount_due))
        image = load_image(png)
    except Exception as exc:
        logger.warning("Skipping payment QR for invoice %r: %s", record.invoice_number, exc, exc_info=True)
        return

    canvas.ensure_space(QR_BLOCK_HEIGHT, reserve=QR_BOTTOM_RESERVE)
    y = canvas.y
    text_x, align = flow.place(flow.left + mm(35), "left")
    canvas.image(image, flow.place_box(flow.left, QR_SIZE), y, QR_SIZE, QR_SIZE, role="payment.qr")
    size = FONT_SIZES["terms"]
    canvas.text(f"SCAN TO PAY ({record.bank_name or 'TRANSFER'})", text_x, y + mm(10), size, align=align, color=color("muted"), role="payment.caption")
    canvas.text(record.account_number, text_x, y + mm(15), size, bold=True, align=align, color=color("muted"), role="payment.account")
    canvas.text(f"Total Due: {amount_due}", text_x, y + mm(20), size, align=align, color=color("muted"), role="payment.total")
    canvas.y = y + mm(35)
