from __future__ import annotations

import unicodedata
from typing import Iterable, Mapping

from invoice_builder.utils.pdf.core.fonts import FontSet, helvetica_width
from invoice_builder.utils.pdf.core.ops import DrawOp, ImageOp, LineOp, TextOp


def _normalize_ascii(text: str) -> str:
    """Remove diacritics (and drop other scripts) to stay compatible with built-in Type1 fonts."""
    normalized = unicodedata.normalize("NFKD", str(text))
    return normalized.encode("ascii", "ignore").decode("ascii")


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".") or "0"


def _draw_text(op: TextOp, fonts: FontSet, page_h: float) -> str:
    font_name = "/F2" if op.bold else "/F1"
    font = fonts.font(op.bold)
    if font is not None:
        width = font.measure(op.text, op.size)
        encoded = f"<{font.encode_text_hex(op.text)}>"
    else:
        ascii_text = _normalize_ascii(op.text)
        width = helvetica_width(ascii_text, op.size, op.bold)
        encoded = f"({_escape_pdf_text(ascii_text)})"
    x = op.x
    if op.align == "right":
        x -= width
    elif op.align == "center":
        x -= width / 2
    y = page_h - op.y
    return f"{op.color} rg BT {font_name} {_num(op.size)} Tf {_num(x)} {_num(y)} Td {encoded} Tj ET\n"


def _draw_line(op: LineOp, page_h: float) -> str:
    return (
        f"{op.color} RG {_num(op.width)} w "
        f"{_num(op.x1)} {_num(page_h - op.y1)} m {_num(op.x2)} {_num(page_h - op.y2)} l S\n"
    )


def _draw_image(op: ImageOp, name: str, page_h: float) -> str:
    bottom = page_h - op.y - op.height
    return f"q {_num(op.width)} 0 0 {_num(op.height)} {_num(op.x)} {_num(bottom)} cm {name} Do Q\n"


def render_ops(ops: Iterable[DrawOp], fonts: FontSet, page_h: float, image_names: Mapping[int, str]) -> str:
    """
    Serialize one page of draw ops into a PDF content stream.
    `image_names` maps id(EmbeddedImage) to its XObject resource name.
    """
    out: list[str] = []
    for op in ops:
        if isinstance(op, TextOp):
            out.append(_draw_text(op, fonts, page_h))
        elif isinstance(op, LineOp):
            out.append(_draw_line(op, page_h))
        elif isinstance(op, ImageOp):
            out.append(_draw_image(op, image_names[id(op.image)], page_h))
    return "".join(out)
