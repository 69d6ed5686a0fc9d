import io
import sys
from pathlib import Path

import pytest

# Ensure `src` is importable when running tests from repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_png(width: int = 20, height: int = 10, mode: str = "RGB") -> bytes:
    from PIL import Image

    buf = io.BytesIO()
    Image.new(mode, (width, height), "red" if mode == "RGB" else (255, 0, 0, 128)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def layout_config(monkeypatch):
    """Built-in Helvetica metrics only, so coordinates do not depend on installed fonts."""
    from invoice_builder.core.services.settings import FONT_DIR_ENV, LayoutConfig

    monkeypatch.delenv(FONT_DIR_ENV, raising=False)
    return LayoutConfig(use_system_fonts=False)


@pytest.fixture
def sample_record():
    from invoice_builder.core.models.invoice import InvoiceRecord, LineItem

    return InvoiceRecord(
        invoice_number="INV-001",
        business_name="Abebe Design",
        business_address="Bole, Addis Ababa",
        business_tin="0012345678",
        client_name="Selam Trading",
        client_address="Piassa, Addis Ababa",
        client_email="accounts@selam.et",
        items=(LineItem(id="1", description="Consulting", quantity=10, unit_price=100),),
        vat_rate=15,
        currency="ETB",
    )


@pytest.fixture
def fake_encoder():
    calls = []

    def encode(text: str) -> bytes:
        calls.append(text)
        return make_png(21, 21)

    encode.calls = calls
    return encode
