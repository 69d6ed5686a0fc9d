from __future__ import annotations

import logging

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.layout_common import (
    FONT_SIZES,
    FREE_TEXT_LINE_HEIGHT,
    FREE_TEXT_RATIO,
    color,
    mm,
)

logger = logging.getLogger(__name__)


def _block(ctx: LayoutContext, key: str, text: str, size: float, spacing: float, check_space: bool) -> None:
    canvas, flow = ctx.canvas, ctx.flow
    lines = ctx.wrap(text, flow.content_width * FREE_TEXT_RATIO, size)
    height = len(lines) * FREE_TEXT_LINE_HEIGHT + spacing
    if check_space and canvas.ensure_space(height):
        logger.debug("%s block moved to page %d", key, canvas.page_index + 1)

    y = canvas.y
    start = {"align": flow.start_align}
    canvas.text(ctx.labels[key].upper(), flow.start_x, y, size, color=color("faint"), role=f"{key}.label", **start)
    canvas.text_lines(lines, flow.start_x, y + mm(5), size, FREE_TEXT_LINE_HEIGHT, color=color("body"), role=f"{key}.text", **start)
    canvas.y = y + height


def render_free_text(ctx: LayoutContext) -> None:
    """
    Bank details, notes and terms, each optional. Only the terms block is checked
    against the bottom margin; it moves to a fresh page when it would not fit.
    """
    record = ctx.record
    ctx.canvas.y += mm(20)
    if record.bank_details:
        _block(ctx, "bankDetails", record.bank_details, FONT_SIZES["small"], mm(10), check_space=False)
    if record.notes:
        _block(ctx, "notes", record.notes, FONT_SIZES["small"], mm(10), check_space=False)
    if record.terms:
        _block(ctx, "terms", record.terms, FONT_SIZES["terms"], mm(15), check_space=True)
