import logging

import pytest
from PIL import Image

from conftest import make_png
from invoice_builder.core.models.invoice import LineItem
from invoice_builder.errors import PaymentCodeError
from invoice_builder.utils.pdf.core.layout_common import mm
from invoice_builder.utils.pdf.core.ops import ImageOp, TextOp
from invoice_builder.utils.pdf.renderers.pdf_renderer import render_document
from invoice_builder.utils.pdf.sections.header import HEADER_STRATEGIES, select_header
from invoice_builder.utils.pdf.sections.items_table import COLUMN_KEYS

LONG_TERMS = "Payment is due within thirty days of the invoice date. " * 40


def texts(doc, role):
    return [op.text for _, op in doc.by_role(role)]


def test_single_page_invoice_has_totals_and_footer(sample_record, layout_config):
    doc = render_document(sample_record, layout_config)

    assert len(doc.pages) == 1
    assert texts(doc, "totals.subtotal.value") == ["1,000.00 ETB"]
    assert texts(doc, "totals.vat.value") == ["150.00 ETB"]
    assert texts(doc, "totals.total.value") == ["1,150.00 ETB"]
    assert texts(doc, "totals.vat.label") == ["VAT (15%):"]
    assert texts(doc, "footer") == ["Thank you for your business!"]
    assert doc.title == "Invoice INV-001"


def test_table_rows_keep_record_order(sample_record, layout_config):
    items = tuple(LineItem(str(i), name, i + 1, 10) for i, name in enumerate(["Alpha", "Beta", "Gamma", "Delta"]))
    doc = render_document(sample_record.with_changes(items=items), layout_config)

    assert texts(doc, "table.cell.description") == ["Alpha", "Beta", "Gamma", "Delta"]
    assert texts(doc, "table.cell.amount") == ["10.00 ETB", "20.00 ETB", "30.00 ETB", "40.00 ETB"]
    assert texts(doc, "table.cell.qty") == ["1", "2", "3", "4"]


def test_wrapped_description_grows_the_row(sample_record, layout_config):
    long_text = "Website redesign including discovery workshops, wireframes and three rounds of revisions"
    items = (LineItem("1", long_text, 1, 10), LineItem("2", "Hosting", 1, 5))
    doc = render_document(sample_record.with_changes(items=items), layout_config)

    description_ops = [op for _, op in doc.by_role("table.cell.description")]
    amount_ops = [op for _, op in doc.by_role("table.cell.amount")]
    first_row_lines = len(description_ops) - 1

    assert first_row_lines > 1
    assert amount_ops[1].y - amount_ops[0].y == pytest.approx(max(first_row_lines * mm(5), mm(10)))


def _header_columns(doc):
    ops = [op for _, op in doc.by_role("table.header.")]
    return {op.role.rsplit(".", 1)[1]: op for op in ops}


def test_rtl_mirrors_table_columns(sample_record, layout_config):
    ltr = _header_columns(render_document(sample_record, layout_config))
    rtl = _header_columns(render_document(sample_record.with_changes(language="ar"), layout_config))

    ltr_order = [key for key, _ in sorted(ltr.items(), key=lambda kv: kv[1].x)]
    rtl_order = [key for key, _ in sorted(rtl.items(), key=lambda kv: kv[1].x)]

    assert ltr_order == list(COLUMN_KEYS)
    assert rtl_order == list(reversed(ltr_order))
    for key in ltr:
        assert rtl[key].x == pytest.approx(layout_config.page_width - ltr[key].x)
        assert {ltr[key].align, rtl[key].align} == {"left", "right"}


def test_rtl_puts_totals_block_on_the_left(sample_record, layout_config):
    doc = render_document(sample_record.with_changes(language="ar"), layout_config)
    (_, value), = doc.by_role("totals.total.value")
    (_, label), = doc.by_role("totals.total.label")

    assert value.align == "left" and value.x == pytest.approx(mm(20))
    assert label.align == "right" and label.x < layout_config.page_width / 2


def test_minimalist_title_stays_on_right_edge_in_rtl(sample_record, layout_config):
    for language in ("en", "ar"):
        record = sample_record.with_changes(template="minimalist", language=language)
        (_, title), = render_document(record, layout_config).by_role("header.title")

        assert title.align == "right"
        assert title.x == pytest.approx(layout_config.page_width - mm(20))
        assert title.y == pytest.approx(mm(30))


def test_modern_title_follows_flow_direction(sample_record, layout_config):
    (_, ltr), = render_document(sample_record, layout_config).by_role("header.title")
    (_, rtl), = render_document(sample_record.with_changes(language="ar"), layout_config).by_role("header.title")

    assert ltr.align == "left" and ltr.x == pytest.approx(mm(20))
    assert rtl.align == "right" and rtl.x == pytest.approx(layout_config.page_width - mm(20))
    assert rtl.text == "فاتورة"


def test_classic_header_is_centered_with_rule(sample_record, layout_config):
    doc = render_document(sample_record.with_changes(template="classic", slogan="Design that works"), layout_config)

    centered = [op for _, op in doc.by_role("header.") if isinstance(op, TextOp)]
    assert centered and all(op.align == "center" for op in centered)
    assert doc.by_role("header.rule")


def test_header_registry_is_closed():
    assert set(HEADER_STRATEGIES) == {"modern", "classic", "minimalist"}
    with pytest.raises(KeyError):
        select_header("fancy")


@pytest.mark.parametrize(
    "template, position, expected_x",
    [
        ("modern", "left", lambda w, page: mm(20)),
        ("modern", "center", lambda w, page: (page - w) / 2),
        ("modern", "right", lambda w, page: page - mm(20) - w),
        ("classic", "left", lambda w, page: (page - w) / 2),
        ("minimalist", "right", lambda w, page: mm(20)),
    ],
)
def test_logo_placement_and_aspect_ratio(sample_record, layout_config, template, position, expected_x):
    record = sample_record.with_changes(logo=make_png(200, 100), logo_position=position, logo_size=120, template=template)
    (_, logo), = render_document(record, layout_config).by_role("header.logo")

    assert isinstance(logo, ImageOp)
    assert logo.height == pytest.approx(logo.width / 2)
    assert logo.x == pytest.approx(expected_x(logo.width, layout_config.page_width))


def test_logo_size_sets_rendered_width(sample_record, layout_config):
    record = sample_record.with_changes(logo=make_png(200, 100), logo_size=120)
    (_, logo), = render_document(record, layout_config).by_role("header.logo")

    assert logo.width == pytest.approx(mm(30))
    assert logo.height == pytest.approx(mm(15))


def test_malformed_logo_is_skipped_and_logged(sample_record, layout_config, caplog):
    with caplog.at_level(logging.WARNING):
        doc = render_document(sample_record.with_changes(logo=b"definitely not an image"), layout_config)

    assert doc.by_role("header.logo") == []
    assert texts(doc, "header.title") == ["Invoice"]
    assert texts(doc, "footer")
    assert "Skipping logo" in caplog.text


def test_oversized_logo_is_skipped(sample_record, layout_config, monkeypatch, caplog):
    logo = make_png(200, 100)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with caplog.at_level(logging.WARNING):
        doc = render_document(sample_record.with_changes(logo=logo), layout_config)

    assert doc.by_role("header.logo") == []
    assert texts(doc, "footer") == ["Thank you for your business!"]
    assert "Skipping logo" in caplog.text


def test_long_terms_move_to_new_page_at_top_margin(sample_record, layout_config):
    doc = render_document(sample_record.with_changes(terms=LONG_TERMS), layout_config)

    assert len(doc.pages) == 2
    (page, label), = doc.by_role("terms.label")
    assert page == 1
    assert label.y == pytest.approx(mm(20))
    assert texts(doc, "terms.label") == ["TERMS & CONDITIONS"]
    # Table and totals stay on the first page, footer only on the last one.
    assert {p for p, _ in doc.by_role("totals.")} == {0}
    assert [p for p, _ in doc.by_role("footer")] == [1]


def test_short_terms_stay_on_first_page(sample_record, layout_config):
    doc = render_document(sample_record.with_changes(terms="Net 30.", notes="Thanks!", bank_details="CBE 1000"), layout_config)

    assert len(doc.pages) == 1
    assert texts(doc, "bankDetails.label") == ["BANK DETAILS"]
    assert texts(doc, "notes.text") == ["Thanks!"]


def test_payment_code_guard_requires_account_number(sample_record, layout_config, fake_encoder):
    record = sample_record.with_changes(show_qr_code=True, account_number="  ")
    doc = render_document(record, layout_config, payment_codes=fake_encoder)

    assert doc.by_role("payment.") == []
    assert fake_encoder.calls == []


def test_payment_code_is_embedded_with_caption(sample_record, layout_config, fake_encoder):
    record = sample_record.with_changes(show_qr_code=True, account_number="1000123456", bank_name="CBE")
    doc = render_document(record, layout_config, payment_codes=fake_encoder)

    assert fake_encoder.calls == ["Payment to: CBE - Account: 1000123456 - Amount: 1,150.00 ETB"]
    (_, qr_op), = doc.by_role("payment.qr")
    assert qr_op.width == pytest.approx(mm(30)) and qr_op.height == pytest.approx(mm(30))
    assert texts(doc, "payment.caption") == ["SCAN TO PAY (CBE)"]
    assert texts(doc, "payment.total") == ["Total Due: 1,150.00 ETB"]


def test_payment_code_moves_to_new_page_when_space_runs_out(sample_record, layout_config, fake_encoder):
    # Eleven wrapped lines: the terms still fit on the first page, the QR block no longer does.
    terms = " ".join(["lorem"] * 140)
    record = sample_record.with_changes(show_qr_code=True, account_number="1000", terms=terms)
    doc = render_document(record, layout_config, payment_codes=fake_encoder)

    assert [p for p, _ in doc.by_role("terms.label")] == [0]
    (page, qr_op), = doc.by_role("payment.qr")
    assert page == 1
    assert qr_op.y == pytest.approx(mm(20))
    assert [p for p, _ in doc.by_role("footer")] == [1]


def test_payment_code_failure_degrades_gracefully(sample_record, layout_config, caplog):
    def broken(text):
        raise PaymentCodeError("encoder unavailable")

    record = sample_record.with_changes(show_qr_code=True, account_number="1000")
    with caplog.at_level(logging.WARNING):
        doc = render_document(record, layout_config, payment_codes=broken)

    assert doc.by_role("payment.") == []
    assert texts(doc, "footer") == ["Thank you for your business!"]
    assert "Skipping payment QR" in caplog.text


def test_renders_do_not_share_state(sample_record, layout_config):
    other = sample_record.with_changes(language="ar", terms=LONG_TERMS, items=(LineItem("9", "Other", 1, 1),))

    first = render_document(sample_record, layout_config)
    render_document(other, layout_config)
    second = render_document(sample_record, layout_config)

    assert len(second.pages) == 1
    assert first.pages[0].ops == second.pages[0].ops


def test_amharic_labels_are_used(sample_record, layout_config):
    doc = render_document(sample_record.with_changes(language="am"), layout_config)

    assert texts(doc, "footer") == ["ስለመረጡን እናመሰግናለን!"]
    assert texts(doc, "table.header.description") == ["ገለፃ"]


def test_accent_color_comes_from_config(sample_record, layout_config):
    config = layout_config.with_changes(accent_color="0.8 0.1 0.1")
    doc = render_document(sample_record, config)

    (_, title), = doc.by_role("header.title")
    (_, total), = doc.by_role("totals.total.value")
    assert title.color == total.color == "0.8 0.1 0.1"


def test_unexpected_encoder_error_skips_payment_section(sample_record, layout_config, caplog):
    def crashing(text):
        raise RuntimeError("encoder crashed")

    record = sample_record.with_changes(show_qr_code=True, account_number="1000")
    with caplog.at_level(logging.WARNING):
        doc = render_document(record, layout_config, payment_codes=crashing)

    assert doc.by_role("payment.") == []
    assert texts(doc, "footer") == ["Thank you for your business!"]
    assert "encoder crashed" in caplog.text


def test_undecodable_encoder_output_skips_payment_section(sample_record, layout_config):
    record = sample_record.with_changes(show_qr_code=True, account_number="1000")
    doc = render_document(record, layout_config, payment_codes=lambda text: b"not a png")

    assert doc.by_role("payment.") == []
    assert texts(doc, "totals.total.value") == ["1,150.00 ETB"]
