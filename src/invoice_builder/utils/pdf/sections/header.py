"""
Header strategies, one per template. The registry is closed: a new template is a new
`HeaderStrategy` subclass plus a registry entry.

Every strategy draws the business identity block and returns the baseline of the
last header line so the engine can continue below it.
"""

from __future__ import annotations

from typing import Dict, Optional

from invoice_builder.utils.pdf.core.canvas import LayoutContext
from invoice_builder.utils.pdf.core.images import EmbeddedImage
from invoice_builder.utils.pdf.core.layout_common import (
    ADDRESS_WIDTH,
    FONT_SIZES,
    HEADER_TOP,
    ROW_LINE_HEIGHT,
    color,
    mm,
)


class HeaderStrategy:
    name = ""
    logo_divisor = 4.0

    def render(self, ctx: LayoutContext) -> float:
        raise NotImplementedError

    def _logo(self, ctx: LayoutContext) -> Optional[tuple[EmbeddedImage, float, float]]:
        """(image, width, height) in points; the height always follows the image's aspect ratio."""
        image = ctx.logo_image()
        if image is None:
            return None
        width = mm(ctx.record.logo_size / self.logo_divisor)
        return image, width, image.height_for(width)


class ModernHeader(HeaderStrategy):
    """Title on the flow-start side, business block on the opposite side; logo honours logo_position."""

    name = "modern"

    def render(self, ctx: LayoutContext) -> float:
        canvas, flow, record, labels = ctx.canvas, ctx.flow, ctx.record, ctx.labels
        y = HEADER_TOP

        logo = self._logo(ctx)
        if logo:
            image, width, height = logo
            x = {
                "left": flow.left,
                "center": (canvas.width - width) / 2,
                "right": flow.right - width,
            }[record.logo_position]
            canvas.image(image, x, y - mm(10), width, height, role="header.logo")
            y += height + mm(10)

        canvas.text(labels["invoice"], flow.start_x, y, FONT_SIZES["title_modern"], align=flow.start_align, color=ctx.accent, role="header.title")
        canvas.text(f"#{record.invoice_number}", flow.start_x, y + mm(8), FONT_SIZES["body"], align=flow.start_align, color=color("slate"), role="header.number")
        start_bottom = y + mm(8)
        if record.slogan:
            start_bottom += mm(6)
            canvas.text(record.slogan, flow.start_x, start_bottom, FONT_SIZES["small"], align=flow.start_align, color=ctx.accent, role="header.slogan")

        canvas.text(record.business_name or "Your Company", flow.end_x, y, FONT_SIZES["business"], bold=True, align=flow.end_align, role="header.business")
        address = ctx.wrap(record.business_address or "Your Address", ADDRESS_WIDTH, FONT_SIZES["body"])
        end_y = canvas.text_lines(address, flow.end_x, y + mm(6), FONT_SIZES["body"], ROW_LINE_HEIGHT, align=flow.end_align, color=color("muted"), role="header.address")
        if record.business_tin:
            canvas.text(f"{labels['tin']}: {record.business_tin}", flow.end_x, end_y, FONT_SIZES["body"], align=flow.end_align, color=color("muted"), role="header.tin")
            end_y += ROW_LINE_HEIGHT
        return max(start_bottom, end_y - ROW_LINE_HEIGHT)


class ClassicHeader(HeaderStrategy):
    """Everything centered, logo on top, a rule line under the business block."""

    name = "classic"

    def render(self, ctx: LayoutContext) -> float:
        canvas, flow, record, labels = ctx.canvas, ctx.flow, ctx.record, ctx.labels
        center = canvas.width / 2
        y = mm(40)

        logo = self._logo(ctx)
        if logo:
            image, width, height = logo
            canvas.image(image, (canvas.width - width) / 2, mm(20), width, height, role="header.logo")
            y = mm(25) + height + mm(10)

        canvas.text(record.business_name or "Your Company", center, y, FONT_SIZES["title_classic"], bold=True, align="center", role="header.business")
        y += mm(8)
        if record.slogan:
            canvas.text(record.slogan, center, y, FONT_SIZES["body"], align="center", color=color("muted"), role="header.slogan")
            y += mm(6)
        if record.business_address:
            address = ctx.wrap(record.business_address, flow.content_width, FONT_SIZES["body"])
            y = canvas.text_lines(address, center, y, FONT_SIZES["body"], ROW_LINE_HEIGHT, align="center", color=color("address"), role="header.address")
        if record.business_tin:
            canvas.text(f"{labels['tin']}: {record.business_tin}", center, y, FONT_SIZES["body"], align="center", color=color("address"), role="header.tin")
            y += ROW_LINE_HEIGHT

        canvas.line(flow.left, y, flow.right, y, width=0.8, role="header.rule")
        y += mm(10)
        canvas.text(f"{labels['invoice'].upper()} #{record.invoice_number}", center, y, FONT_SIZES["business"], bold=True, align="center", role="header.title")
        return y


class MinimalistHeader(HeaderStrategy):
    """
    Title and number pinned to the right page edge at fixed heights in every language;
    logo and business block are always left-anchored.
    """

    name = "minimalist"
    logo_divisor = 5.0

    def render(self, ctx: LayoutContext) -> float:
        canvas, flow, record, labels = ctx.canvas, ctx.flow, ctx.record, ctx.labels
        y = HEADER_TOP

        logo = self._logo(ctx)
        if logo:
            image, width, height = logo
            canvas.image(image, flow.left, y - mm(10), width, height, role="header.logo")
            y += height + mm(5)

        canvas.text(labels["invoice"].upper(), flow.right, mm(30), FONT_SIZES["title_minimalist"], align="right", color=color("faint"), role="header.title")
        canvas.text(f"#{record.invoice_number}", flow.right, mm(38), FONT_SIZES["body"], align="right", color=color("faint"), role="header.number")

        canvas.text(record.business_name, flow.left, y, FONT_SIZES["business"], bold=True, role="header.business")
        y += mm(6)
        if record.business_address:
            address = ctx.wrap(record.business_address, ADDRESS_WIDTH, FONT_SIZES["body"])
            y = canvas.text_lines(address, flow.left, y, FONT_SIZES["body"], ROW_LINE_HEIGHT, color=color("muted"), role="header.address")
        else:
            y += ROW_LINE_HEIGHT
        return max(y - ROW_LINE_HEIGHT, mm(38))


HEADER_STRATEGIES: Dict[str, HeaderStrategy] = {
    strategy.name: strategy for strategy in (ModernHeader(), ClassicHeader(), MinimalistHeader())
}


def select_header(template: str) -> HeaderStrategy:
    """Raises KeyError for templates outside the registry."""
    return HEADER_STRATEGIES[template]
