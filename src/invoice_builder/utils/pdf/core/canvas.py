"""
Per-render drawing state: the page list, the vertical cursor and the shared context
handed to every section. A new canvas is created for every render call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from invoice_builder.core.calculations.totals import InvoiceTotals
from invoice_builder.core.models.invoice import InvoiceRecord
from invoice_builder.core.services.settings import LayoutConfig
from invoice_builder.errors import LogoImageError
from invoice_builder.utils.pdf.core.fonts import FontSet
from invoice_builder.utils.pdf.core.images import EmbeddedImage, load_image
from invoice_builder.utils.pdf.core.layout_common import Flow
from invoice_builder.utils.pdf.core.ops import ImageOp, LineOp, Page, TextOp
from invoice_builder.utils.qr import PaymentCodeEncoder
from invoice_builder.utils.text import format_money, wrap_text

logger = logging.getLogger(__name__)


class PageCanvas:
    def __init__(self, width: float, height: float, top_margin: float, bottom_margin: float):
        self.width = width
        self.height = height
        self.top_margin = top_margin
        self.bottom_margin = bottom_margin
        self.pages: list[Page] = [Page(index=0)]
        self.y = 0.0

    @property
    def page(self) -> Page:
        return self.pages[-1]

    @property
    def page_index(self) -> int:
        return self.page.index

    def new_page(self) -> None:
        self.pages.append(Page(index=len(self.pages)))
        self.y = self.top_margin

    def fits(self, height: float, reserve: Optional[float] = None) -> bool:
        bottom = self.bottom_margin if reserve is None else reserve
        return self.y + height <= self.height - bottom

    def ensure_space(self, height: float, reserve: Optional[float] = None) -> bool:
        """Start a new page when `height` does not fit above the reserve; True if a break happened."""
        if self.fits(height, reserve):
            return False
        self.new_page()
        return True

    def text(self, text: str, x: float, y: float, size: float, **style) -> None:
        self.page.ops.append(TextOp(str(text), x, y, size, **style))

    def text_lines(self, lines: Iterable[str], x: float, y: float, size: float, leading: float, **style) -> float:
        """Draw one TextOp per line; returns the baseline after the last line."""
        for line in lines:
            self.text(line, x, y, size, **style)
            y += leading
        return y

    def line(self, x1: float, y1: float, x2: float, y2: float, **style) -> None:
        self.page.ops.append(LineOp(x1, y1, x2, y2, **style))

    def image(self, image: EmbeddedImage, x: float, y: float, width: float, height: float, role: str = "") -> None:
        self.page.ops.append(ImageOp(image, x, y, width, height, role=role))


@dataclass
class LayoutContext:
    record: InvoiceRecord
    totals: InvoiceTotals
    flow: Flow
    labels: Mapping[str, str]
    fonts: FontSet
    canvas: PageCanvas
    config: LayoutConfig
    encode_payment_code: PaymentCodeEncoder
    _logo: Optional[EmbeddedImage] = field(default=None, repr=False)
    _logo_failed: bool = field(default=False, repr=False)

    @property
    def accent(self) -> str:
        return self.config.accent_color

    def money(self, amount: float) -> str:
        return format_money(amount, self.record.currency)

    def wrap(self, text: str, width: float, size: float, bold: bool = False) -> list[str]:
        return wrap_text(text, width, size, measure=lambda t, s: self.fonts.measure(t, s, bold))

    def logo_image(self) -> Optional[EmbeddedImage]:
        """Decoded logo, or None when absent or unreadable (reported once per render)."""
        if self._logo is not None or self._logo_failed or not self.record.logo:
            return self._logo
        try:
            self._logo = load_image(self.record.logo)
        except LogoImageError as exc:
            self._logo_failed = True
            logger.warning("Skipping logo for invoice %r: %s", self.record.invoice_number, exc)
        return self._logo
