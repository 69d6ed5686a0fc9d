from __future__ import annotations

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.layout_common import FONT_SIZES, FOOTER_OFFSET, color


def render_footer(ctx: LayoutContext) -> None:
    # Current (last) page only; earlier pages of a multi-page invoice carry no footer.
    canvas = ctx.canvas
    canvas.text(ctx.labels["thankYou"], canvas.width / 2, canvas.height - FOOTER_OFFSET, FONT_SIZES["body"], align="center", color=color("faint"), role="footer")
