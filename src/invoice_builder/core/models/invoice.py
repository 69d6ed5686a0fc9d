from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from invoice_builder.core.calculations.totals import InvoiceTotals, compute_totals, line_amount
from invoice_builder.errors import InvalidInvoiceError

TEMPLATES = ("modern", "classic", "minimalist")
LANGUAGES = ("en", "am", "ar")
RTL_LANGUAGES = ("ar",)
LOGO_POSITIONS = ("left", "center", "right")
LOGO_SIZE_MIN, LOGO_SIZE_MAX = 50, 300

DEFAULT_VAT_RATE = 15.0
DEFAULT_CURRENCY = "ETB"

_TIN_RE = re.compile(r"^\d{10}$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _safe_float(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _text(value) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class LineItem:
    """A single billable row; order inside the invoice is significant."""

    id: str
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0

    def __post_init__(self) -> None:
        # Non-numeric values render as zero amounts instead of failing the totals.
        object.__setattr__(self, "quantity", _safe_float(self.quantity, 0.0))
        object.__setattr__(self, "unit_price", _safe_float(self.unit_price, 0.0))

    @property
    def amount(self) -> float:
        return line_amount(self.quantity, self.unit_price)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], index: int = 0) -> "LineItem":
        raw_id = data.get("id")
        return cls(
            id=_text(raw_id) if raw_id not in (None, "") else str(index + 1),
            description=_text(data.get("description")),
            quantity=_safe_float(data.get("quantity", 1), 0.0),
            unit_price=_safe_float(data.get("unitPrice", data.get("unit_price", 0)), 0.0),
        )


@dataclass(frozen=True)
class InvoiceRecord:
    """
    Immutable snapshot of one invoice as handed to the layout engine.
    Every edit in the builder produces a new snapshot (see `with_changes`).
    """

    invoice_number: str = ""
    business_name: str = ""
    business_address: str = ""
    business_tin: str = ""
    client_name: str = ""
    client_address: str = ""
    client_email: str = ""
    items: tuple[LineItem, ...] = field(default_factory=tuple)
    vat_rate: float = DEFAULT_VAT_RATE
    currency: str = DEFAULT_CURRENCY
    template: str = "modern"
    language: str = "en"
    logo: bytes | None = None
    logo_position: str = "left"
    logo_size: int = 120
    due_date: str = ""
    po_number: str = ""
    slogan: str = ""
    notes: str = ""
    bank_details: str = ""
    terms: str = ""
    bank_name: str = ""
    account_number: str = ""
    show_qr_code: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        seen: set[str] = set()
        for item in self.items:
            if item.id in seen:
                raise InvalidInvoiceError(f"Duplicate line item id: {item.id}")
            seen.add(item.id)
        if self.template not in TEMPLATES:
            raise InvalidInvoiceError(f"Unknown template: {self.template}")
        if self.logo_position not in LOGO_POSITIONS:
            raise InvalidInvoiceError(f"Unknown logo position: {self.logo_position}")
        size = int(self.logo_size)
        object.__setattr__(self, "logo_size", min(LOGO_SIZE_MAX, max(LOGO_SIZE_MIN, size)))

    # Derived values are recomputed on every access.
    @property
    def totals(self) -> InvoiceTotals:
        return compute_totals(self.items, self.vat_rate)

    @property
    def subtotal(self) -> float:
        return self.totals.subtotal

    @property
    def vat_amount(self) -> float:
        return self.totals.vat_amount

    @property
    def total(self) -> float:
        return self.totals.total

    @property
    def direction(self) -> str:
        return "rtl" if self.language in RTL_LANGUAGES else "ltr"

    def with_changes(self, **changes: Any) -> "InvoiceRecord":
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "InvoiceRecord":
        """
        Build a snapshot from the builder's form state (camelCase keys, snake_case also accepted).
        Unknown templates fall back to `modern`, languages to `en`, logo positions to `left`;
        non-numeric numbers are coerced instead of rejected.
        """

        def get(camel: str, snake: str, default: Any = "") -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        items = tuple(
            LineItem.from_mapping(item, index) for index, item in enumerate(get("items", "items", ()) or ())
        )
        template = _text(get("template", "template", "modern")) or "modern"
        if template not in TEMPLATES:
            template = "modern"
        logo_position = _text(get("logoPosition", "logo_position", "left")) or "left"
        if logo_position not in LOGO_POSITIONS:
            logo_position = "left"
        language = _text(get("language", "language", "en"))
        if language not in LANGUAGES:
            language = "en"
        vat_raw = get("vatRate", "vat_rate", DEFAULT_VAT_RATE)
        return cls(
            invoice_number=_text(get("invoiceNumber", "invoice_number")),
            business_name=_text(get("businessName", "business_name")),
            business_address=_text(get("businessAddress", "business_address")),
            business_tin=_text(get("businessTIN", "business_tin")),
            client_name=_text(get("clientName", "client_name")),
            client_address=_text(get("clientAddress", "client_address")),
            client_email=_text(get("clientEmail", "client_email")),
            items=items,
            vat_rate=_safe_float(vat_raw, DEFAULT_VAT_RATE) if vat_raw not in (None, "") else DEFAULT_VAT_RATE,
            currency=_text(get("currency", "currency", DEFAULT_CURRENCY)) or DEFAULT_CURRENCY,
            template=template,
            language=language,
            logo=decode_logo(get("logo", "logo", None)),
            logo_position=logo_position,
            logo_size=int(_safe_float(get("logoSize", "logo_size", 120), 120)),
            due_date=_text(get("dueDate", "due_date")),
            po_number=_text(get("poNumber", "po_number")),
            slogan=_text(get("slogan", "slogan")),
            notes=_text(get("notes", "notes")),
            bank_details=_text(get("bankDetails", "bank_details")),
            terms=_text(get("terms", "terms")),
            bank_name=_text(get("bankName", "bank_name")),
            account_number=_text(get("accountNumber", "account_number")),
            show_qr_code=_flag(get("showQRCode", "show_qr_code", False)),
        )


def decode_logo(value: Any) -> bytes | None:
    """
    Accept raw bytes or a `data:` URL as produced by a browser file reader.
    Undecodable base64 is passed through as raw bytes so the layout step can report it.
    """
    if not value:
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = str(value)
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return text.encode("utf-8", "ignore")


@dataclass(frozen=True)
class Advisory:
    field: str
    message: str


def advisories(record: InvoiceRecord) -> list[Advisory]:
    """Non-blocking input hints for the form layer; rendering never depends on them."""
    hints: list[Advisory] = []
    if record.business_tin and not _TIN_RE.match(record.business_tin.strip()):
        hints.append(Advisory("business_tin", "TIN should contain exactly 10 digits"))
    if record.client_email and not _EMAIL_RE.match(record.client_email.strip()):
        hints.append(Advisory("client_email", "Email address looks malformed"))
    for item in record.items:
        if item.quantity <= 0:
            hints.append(Advisory(f"items[{item.id}].quantity", "Quantity should be greater than zero"))
    return hints
