"""Tests for printer settings and field visibility."""

from dataclasses import fields

import pytest

from billing.errors import ValidationError
from billing.settings import (
    DEFAULT_TERMS,
    DEFAULT_THANK_YOU,
    FieldVisibility,
    FontSize,
    InvoiceField,
    PrinterSettings,
    PrinterType,
)


class TestInvoiceField:
    """Tests for the enumerated optional fields."""

    def test_every_field_has_a_visibility_flag(self) -> None:
        """Test the enum and the visibility flags cover the same fields."""
        assert {member.attr for member in InvoiceField} == {f.name for f in fields(FieldVisibility)}

    def test_from_key(self) -> None:
        assert InvoiceField.from_key("barcodeQR") is InvoiceField.BARCODE_QR
        assert InvoiceField.from_key("logo") is None

    def test_labels(self) -> None:
        assert InvoiceField.GST_NUMBER.label == "GST Number"
        assert len(InvoiceField) == 22


class TestFieldVisibility:
    """Tests for per-field visibility flags."""

    def test_all_visible_by_default(self) -> None:
        visibility = FieldVisibility()

        assert all(visibility.is_visible(member) for member in InvoiceField)

    @pytest.mark.parametrize("invoice_field", list(InvoiceField))
    def test_each_field_has_its_own_flag(self, invoice_field) -> None:
        """Test hiding one field hides exactly that field."""
        visibility = FieldVisibility().with_field(invoice_field, False)

        assert not visibility.is_visible(invoice_field)
        assert all(visibility.is_visible(other) for other in InvoiceField if other is not invoice_field)

    def test_with_field(self) -> None:
        visibility = FieldVisibility().with_field(InvoiceField.SAVED_AMOUNT, False)

        assert visibility.saved_amount is False
        assert visibility.is_visible(InvoiceField.TOTAL)

    def test_document_round_trip(self) -> None:
        visibility = FieldVisibility(email=False, barcode_qr=False)

        document = visibility.to_document()

        assert document["email"] is False
        assert document["barcodeQR"] is False
        assert FieldVisibility().merged(document) == visibility


class TestPrinterSettingsLoad:
    """Tests for merging stored documents over defaults."""

    def test_defaults(self) -> None:
        """Test the defaults when nothing is stored."""
        settings = PrinterSettings.load(None)

        assert settings.printer_type is PrinterType.THERMAL
        assert settings.paper_size == "3inch"
        assert settings.font_size is FontSize.MEDIUM
        assert settings.custom_content.thank_you_message == DEFAULT_THANK_YOU
        assert settings.custom_content.terms_and_conditions == DEFAULT_TERMS
        assert settings.custom_content.custom_notes == ""

    def test_partial_document_keeps_default_leaves(self) -> None:
        """Test a stored document overrides only the leaves it names."""
        settings = PrinterSettings.load(
            {
                "fontSize": "large",
                "invoiceFields": {"gstNumber": False},
                "customContent": {"customNotes": "Goods once sold are not returnable"},
            }
        )

        assert settings.font_size is FontSize.LARGE
        assert settings.invoice_fields.gst_number is False
        assert settings.invoice_fields.company_name is True
        assert settings.custom_content.custom_notes == "Goods once sold are not returnable"
        assert settings.custom_content.thank_you_message == DEFAULT_THANK_YOU

    def test_later_documents_win(self) -> None:
        settings = PrinterSettings.load(
            {"fontSize": "small", "invoiceFields": {"email": False, "total": False}},
            {"fontSize": "large", "invoiceFields": {"email": True}},
        )

        assert settings.font_size is FontSize.LARGE
        assert settings.invoice_fields.email is True
        assert settings.invoice_fields.total is False

    def test_unknown_keys_ignored(self) -> None:
        settings = PrinterSettings.load({"theme": "dark", "invoiceFields": {"logo": False}})

        assert settings == PrinterSettings()

    def test_laser_without_paper_uses_a4(self) -> None:
        settings = PrinterSettings.load({"printerType": "laser"})

        assert settings.printer_type is PrinterType.LASER
        assert settings.paper_size == "A4"

    def test_mismatched_paper_falls_back_to_type_default(self) -> None:
        settings = PrinterSettings.load({"printerType": "laser", "paperSize": "3inch"})

        assert settings.paper_size == "A4"

    def test_invalid_enum_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            PrinterSettings.load({"printerType": "inkjet"})

        assert exc_info.value.field == "printerType"

    def test_document_round_trip(self) -> None:
        settings = PrinterSettings.load(
            {"printerType": "laser", "paperSize": "A5", "fontSize": "small"}
        )

        assert PrinterSettings.load(settings.to_document()) == settings


class TestPrinterSettings:
    """Tests for settings construction and switching."""

    def test_paper_must_match_type(self) -> None:
        with pytest.raises(ValidationError):
            PrinterSettings(printer_type=PrinterType.THERMAL, paper_size="A4")

    def test_switching_type_resets_paper(self) -> None:
        settings = PrinterSettings(paper_size="4inch")

        laser = settings.with_printer_type(PrinterType.LASER)

        assert laser.paper_size == "A4"
        assert laser.with_printer_type(PrinterType.THERMAL).paper_size == "3inch"

    def test_paper_width(self) -> None:
        assert PrinterSettings().paper_width_mm == pytest.approx(76.2)
        assert PrinterSettings(printer_type=PrinterType.LASER, paper_size="A5").paper_width_mm == 148.0

    def test_font_scale(self) -> None:
        assert FontSize.SMALL.scale == 0.875
        assert FontSize.LARGE.scale == 1.125
