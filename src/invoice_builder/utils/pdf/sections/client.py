from __future__ import annotations

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.layout_common import ADDRESS_WIDTH, FONT_SIZES, ROW_LINE_HEIGHT, color, mm


def render_bill_to(ctx: LayoutContext, top: float) -> float:
    """
    Client block on the flow-start side, due date / PO number opposite it.
    Returns the first free baseline below both columns.
    """
    canvas, flow, record, labels = ctx.canvas, ctx.flow, ctx.record, ctx.labels
    start = {"align": flow.start_align}
    canvas.text(labels["billTo"].upper(), flow.start_x, top, FONT_SIZES["small"], color=color("faint"), role="party.label", **start)
    canvas.text(record.client_name or "Client Name", flow.start_x, top + mm(6), FONT_SIZES["business"], bold=True, role="party.name", **start)
    address = ctx.wrap(record.client_address or "Client Address", ADDRESS_WIDTH, FONT_SIZES["body"])
    y = canvas.text_lines(address, flow.start_x, top + mm(12), FONT_SIZES["body"], ROW_LINE_HEIGHT, color=color("muted"), role="party.address", **start)
    if record.client_email:
        canvas.text(record.client_email, flow.start_x, y, FONT_SIZES["small"], color=ctx.accent, role="party.email", **start)
        y += ROW_LINE_HEIGHT

    extra_y = top + mm(7)
    for key, value in (("dueDate", record.due_date), ("poNumber", record.po_number)):
        if value:
            canvas.text(f"{labels[key]}: {value}", flow.end_x, extra_y, FONT_SIZES["body"], align=flow.end_align, color=color("muted"), role=f"party.{key}")
            extra_y += mm(6)
    return max(y, extra_y)
