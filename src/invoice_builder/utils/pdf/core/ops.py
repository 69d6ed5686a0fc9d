"""
Positioned draw operations produced by the layout engine.

Coordinates are PDF points measured from the top-left corner of the page
(`y` grows downwards, text `y` is the baseline); the PDF writer flips them.
Every op carries a `role` so callers and tests can find sections without parsing PDF.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from invoice_builder.utils.pdf.core.fonts import FontSet
from invoice_builder.utils.pdf.core.images import EmbeddedImage


@dataclass(frozen=True)
class TextOp:
    text: str
    x: float
    y: float
    size: float
    bold: bool = False
    align: str = "left"  # left / center / right, relative to x
    color: str = "0 0 0"
    role: str = ""


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.5
    color: str = "0 0 0"
    role: str = ""


@dataclass(frozen=True)
class ImageOp:
    image: EmbeddedImage
    x: float
    y: float  # top edge
    width: float
    height: float
    role: str = ""


DrawOp = Union[TextOp, LineOp, ImageOp]


@dataclass
class Page:
    index: int
    ops: List[DrawOp] = field(default_factory=list)

    def by_role(self, prefix: str) -> List[DrawOp]:
        return [op for op in self.ops if op.role.startswith(prefix)]


@dataclass
class Document:
    pages: List[Page]
    width: float
    height: float
    title: str = ""
    author: str = ""
    creator: str = ""
    fonts: FontSet = field(default_factory=FontSet, repr=False, compare=False)

    def by_role(self, prefix: str) -> List[tuple[int, DrawOp]]:
        """(page index, op) pairs in emission order."""
        return [(page.index, op) for page in self.pages for op in page.by_role(prefix)]
