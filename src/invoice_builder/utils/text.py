from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable

from invoice_builder.utils.pdf.core.fonts import helvetica_width

Measure = Callable[[str, float], float]

_CENT = Decimal("0.01")


def _default_measure(text: str, size: float) -> float:
    return helvetica_width(text, size)


def wrap_text(text: str, max_width: float, font_size: float, measure: Measure = _default_measure) -> list[str]:
    """
    Greedy word wrap: fewest lines whose measured width stays within `max_width`.
    Breaks only on whitespace; a word wider than `max_width` gets its own overflowing line.
    Explicit newlines always start a new line. Empty input gives `[""]`.
    """
    text = "" if text is None else str(text)
    if measure(text, font_size) <= max_width and "\n" not in text:
        return [text]

    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if not current or measure(candidate, font_size) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def format_money(amount, currency: str) -> str:
    """`1150` -> `"1,150.00 ETB"`: grouped integer part, two decimals rounded half-up, code suffix."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)
    rounded = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{rounded:,.2f} {currency}".rstrip()


def format_quantity(value) -> str:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{numeric:g}"
