import pytest

from invoice_builder.errors import PaymentCodeError
from invoice_builder.utils import qr
from invoice_builder.utils.pdf.core.images import load_image


def test_encode_returns_png():
    png = qr.encode("Payment to: CBE - Account: 1000 - Amount: 10.00 ETB")

    assert png.startswith(b"\x89PNG")
    image = load_image(png)
    assert image.width == image.height


def test_encode_rejects_blank_payload():
    with pytest.raises(PaymentCodeError):
        qr.encode("   ")


def test_encode_rejects_oversized_payload():
    with pytest.raises(PaymentCodeError):
        qr.encode("x" * 5000)


def test_payment_payload_without_bank():
    assert qr.payment_payload("", "1000", "5.00 ETB") == "Payment to:  - Account: 1000 - Amount: 5.00 ETB"
