from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    vat_rate: float
    vat_amount: float

    @property
    def total(self) -> float:
        return self.subtotal + self.vat_amount


def line_amount(quantity: float, unit_price: float) -> float:
    return float(quantity) * float(unit_price)


def compute_totals(items: Iterable, vat_rate: float) -> InvoiceTotals:
    """
    Sum line items and apply a single flat VAT percentage.
    Items only need `quantity` and `unit_price`; non-positive quantities are summed as-is.
    """
    subtotal = 0.0
    for item in items:
        subtotal += line_amount(item.quantity, item.unit_price)
    rate = float(vat_rate)
    return InvoiceTotals(subtotal=subtotal, vat_rate=rate, vat_amount=subtotal * rate / 100)
