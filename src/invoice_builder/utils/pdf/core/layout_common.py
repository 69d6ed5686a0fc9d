"""
Layout constants (PDF points unless noted) and the text-flow helper shared by all sections.
"""

from __future__ import annotations

from dataclasses import dataclass


def mm(value: float) -> float:
    return value * 72.0 / 25.4


# Vertical rhythm
HEADER_TOP = mm(30)
PARTY_GAP = mm(20)
PARTY_MIN_Y = mm(70)
TABLE_GAP = mm(35)
ROW_LINE_HEIGHT = mm(5)
MIN_ROW_HEIGHT = mm(10)
FREE_TEXT_LINE_HEIGHT = mm(4)
FOOTER_OFFSET = mm(15)

# Column widths
DESCRIPTION_WIDTH = mm(80)
ADDRESS_WIDTH = mm(60)
FREE_TEXT_RATIO = 0.6

# Table column anchors measured from the right page edge (LTR)
QTY_FROM_RIGHT = mm(80)
UNIT_PRICE_FROM_RIGHT = mm(45)
TOTALS_BLOCK_WIDTH = mm(90)

# Payment code
QR_SIZE = mm(30)
QR_BLOCK_HEIGHT = mm(40)
QR_BOTTOM_RESERVE = mm(20)

FONT_SIZES = {
    "title_modern": 24,
    "title_classic": 22,
    "title_minimalist": 28,
    "business": 12,
    "body": 10,
    "small": 9,
    "terms": 8,
    "total": 14,
}

COLORS = {
    "text": "0 0 0",
    "slate": "0.39 0.45 0.55",
    "muted": "0.39 0.39 0.39",
    "faint": "0.59 0.59 0.59",
    "body": "0.20 0.20 0.20",
    "address": "0.31 0.31 0.31",
}


def color(name: str) -> str:
    return COLORS.get(name, "0 0 0")


@dataclass(frozen=True)
class Flow:
    """
    Resolved text-flow direction for one render. Sections ask it for sides and
    alignments instead of looking at the language again.
    """

    rtl: bool
    page_width: float
    margin: float

    @property
    def left(self) -> float:
        return self.margin

    @property
    def right(self) -> float:
        return self.page_width - self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def start_x(self) -> float:
        return self.right if self.rtl else self.left

    @property
    def end_x(self) -> float:
        return self.left if self.rtl else self.right

    @property
    def start_align(self) -> str:
        return "right" if self.rtl else "left"

    @property
    def end_align(self) -> str:
        return "left" if self.rtl else "right"

    def place(self, x: float, align: str) -> tuple[float, str]:
        """Map an LTR anchor to this flow: RTL mirrors x around the page centre and flips the alignment."""
        if not self.rtl:
            return x, align
        flipped = {"left": "right", "right": "left"}.get(align, align)
        return self.page_width - x, flipped

    def place_box(self, x: float, width: float) -> float:
        """Left edge of an LTR box after mirroring."""
        return self.page_width - x - width if self.rtl else x
