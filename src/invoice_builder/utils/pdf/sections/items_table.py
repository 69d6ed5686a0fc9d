from __future__ import annotations

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.layout_common import (
    DESCRIPTION_WIDTH,
    FONT_SIZES,
    MIN_ROW_HEIGHT,
    QTY_FROM_RIGHT,
    ROW_LINE_HEIGHT,
    UNIT_PRICE_FROM_RIGHT,
    Flow,
    mm,
)
from invoice_builder.utils.text import format_quantity

COLUMN_KEYS = ("description", "qty", "unitPrice", "amount")


def column_anchors(flow: Flow) -> list[tuple[str, float, str]]:
    """
    (key, x, align) per column. Anchors are defined once for LTR; RTL mirrors them,
    so description lands on the right edge and amount on the left.
    """
    ltr = [
        ("description", flow.margin, "left"),
        ("qty", flow.page_width - QTY_FROM_RIGHT, "right"),
        ("unitPrice", flow.page_width - UNIT_PRICE_FROM_RIGHT, "right"),
        ("amount", flow.page_width - flow.margin, "right"),
    ]
    return [(key, *flow.place(x, align)) for key, x, align in ltr]


def render_items_table(ctx: LayoutContext) -> None:
    """Header row between two rules, then one row per line item in record order. Advances the cursor."""
    canvas, flow, record, labels = ctx.canvas, ctx.flow, ctx.record, ctx.labels
    size = FONT_SIZES["body"]
    rule_width = 0.3 if record.template == "minimalist" else 1.4
    anchors = column_anchors(flow)
    top = canvas.y

    canvas.line(flow.left, top, flow.right, top, width=rule_width, role="table.rule")
    for key, x, align in anchors:
        canvas.text(labels[key], x, top + mm(7), size, bold=True, align=align, role=f"table.header.{key}")
    canvas.line(flow.left, top + mm(12), flow.right, top + mm(12), width=rule_width, role="table.rule")

    y = top + mm(20)
    for item in record.items:
        description = ctx.wrap(item.description or "Service/Item", DESCRIPTION_WIDTH, size)
        cells = {
            "qty": format_quantity(item.quantity),
            "unitPrice": ctx.money(item.unit_price),
            "amount": ctx.money(item.amount),
        }
        for key, x, align in anchors:
            if key == "description":
                canvas.text_lines(description, x, y, size, ROW_LINE_HEIGHT, align=align, role="table.cell.description")
            else:
                canvas.text(cells[key], x, y, size, align=align, role=f"table.cell.{key}")
        y += max(len(description) * ROW_LINE_HEIGHT, MIN_ROW_HEIGHT)
    canvas.y = y
