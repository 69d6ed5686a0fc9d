from __future__ import annotations

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.layout_common import FONT_SIZES, TOTALS_BLOCK_WIDTH, color, mm
from invoice_builder.utils.text import format_quantity


def render_totals(ctx: LayoutContext) -> None:
    """
    Subtotal, VAT and total under a short rule. The block sits at the right in LTR and is
    mirrored to the left in RTL (labels keep to the outer edge, values to the margin).
    """
    canvas, flow, labels, totals = ctx.canvas, ctx.flow, ctx.labels, ctx.totals
    block_left = canvas.width - TOTALS_BLOCK_WIDTH
    y = canvas.y + mm(10)

    rule_x = flow.place_box(block_left, TOTALS_BLOCK_WIDTH - flow.margin)
    canvas.line(rule_x, y, rule_x + TOTALS_BLOCK_WIDTH - flow.margin, y, width=0.5, role="totals.rule")

    label_x, label_align = flow.place(block_left, "left")
    value_x, value_align = flow.place(flow.right, "right")
    rows = [
        ("subtotal", f"{labels['subtotal']}:", totals.subtotal, mm(7)),
        ("vat", f"{labels['vat']} ({format_quantity(totals.vat_rate)}%):", totals.vat_amount, mm(10)),
        ("total", f"{labels['total']}:", totals.total, 0),
    ]
    y += mm(10)
    for key, label, amount, advance in rows:
        emphasized = key == "total"
        style = {
            "size": FONT_SIZES["total"] if emphasized else FONT_SIZES["body"],
            "bold": emphasized,
            "color": ctx.accent if emphasized and ctx.record.template == "modern" else color("text"),
        }
        canvas.text(label, label_x, y, align=label_align, role=f"totals.{key}.label", **style)
        canvas.text(ctx.money(amount), value_x, y, align=value_align, role=f"totals.{key}.value", **style)
        y += advance
    canvas.y = y
