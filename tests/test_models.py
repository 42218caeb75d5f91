"""Tests for invoice and company models."""

from datetime import datetime, timezone

import pytest

from billing.errors import ValidationError
from billing.models.company import CompanyProfile
from billing.models.invoice import (
    BillDiscount,
    DiscountType,
    InvoiceSnapshot,
    LineItem,
    format_currency,
)


class TestLineItem:
    """Tests for LineItem validation and records."""

    @pytest.mark.parametrize("field", ["quantity", "rate", "discounted_rate"])
    def test_negative_values_rejected(self, field) -> None:
        """Test validate rejects negative numeric fields."""
        item = LineItem(**{"name": "Pen", "quantity": 1, "rate": 1, field: -1})

        with pytest.raises(ValidationError) as exc_info:
            item.validate()

        assert exc_info.value.field == field

    def test_items_are_immutable(self) -> None:
        item = LineItem(name="Pen", quantity=1, rate=1)

        with pytest.raises(AttributeError):
            item.quantity = 7

    def test_empty_name_is_allowed(self) -> None:
        LineItem(name="", quantity=1, rate=5).validate()

    def test_record_shape(self) -> None:
        """Test the stored document keys match the invoice store."""
        item = LineItem(name="Pen", quantity=2, rate=10.0, discounted_rate=9.0)

        assert item.to_record() == {
            "name": "Pen",
            "quantity": 2,
            "rate": 10.0,
            "discountedRate": 9.0,
            "amount": 18.0,
        }

    def test_from_record_ignores_stored_amount(self) -> None:
        """Test amount is always derived, never read back."""
        item = LineItem.from_record(
            {"name": "Pen", "quantity": 2, "rate": 10, "discountedRate": 0, "amount": 999}
        )

        assert item.amount == 20.0


class TestBillDiscount:
    """Tests for BillDiscount."""

    def test_defaults_to_zero_percent(self) -> None:
        discount = BillDiscount()

        assert discount.type is DiscountType.PERCENTAGE
        assert discount.value == 0.0

    def test_accepts_type_strings(self) -> None:
        assert BillDiscount("amount", 5).type is DiscountType.AMOUNT

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BillDiscount.from_record({"type": "coupon", "value": 5})

    def test_negative_value_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BillDiscount(DiscountType.AMOUNT, -1).validate()

    def test_record_round_trip(self) -> None:
        discount = BillDiscount(DiscountType.AMOUNT, 25.5)

        assert discount.to_record() == {"type": "amount", "value": 25.5}
        assert BillDiscount.from_record(discount.to_record()) == discount

    def test_missing_record_gives_default(self) -> None:
        assert BillDiscount.from_record(None) == BillDiscount()


class TestInvoiceSnapshot:
    """Tests for building and restoring invoice snapshots."""

    def test_build_computes_totals(self, make_snapshot) -> None:
        """Test build stores every pricing aggregate."""
        snapshot = make_snapshot()

        assert snapshot.subtotal == 100.0
        assert snapshot.item_discounts == 20.0
        assert snapshot.bill_discount_amount == 8.0
        assert snapshot.total_discount == 28.0
        assert snapshot.total_savings == 28.0
        assert snapshot.total == 72.0
        assert snapshot.status == "completed"
        assert snapshot.record_id is None

    def test_items_cannot_change_after_build(self) -> None:
        """Test a built invoice's items reject edits, keeping amounts and totals in step."""
        snapshot = InvoiceSnapshot.build(
            "INV-0001", "acct", [LineItem(name="Widget", quantity=1, rate=100.0)], BillDiscount()
        )

        with pytest.raises(AttributeError):
            snapshot.items[0].quantity = 7

        assert snapshot.items[0].amount == snapshot.subtotal == 100.0

    def test_build_defaults_created_at_to_now_utc(self) -> None:
        snapshot = InvoiceSnapshot.build("INV-0001", "acct", [], BillDiscount())

        assert snapshot.created_at.tzinfo is not None
        assert snapshot.created_at.utcoffset().total_seconds() == 0

    def test_snapshot_is_frozen(self, make_snapshot) -> None:
        snapshot = make_snapshot()

        with pytest.raises(AttributeError):
            snapshot.total = 0

    def test_record_round_trip_keeps_stored_totals(self, make_snapshot) -> None:
        """Test restored invoices keep stored totals even if they differ from a recomputation."""
        record = make_snapshot().to_record()
        record["total"] = 70.0

        restored = InvoiceSnapshot.from_record(record, record_id="abc")

        assert restored.total == 70.0
        assert restored.record_id == "abc"
        assert restored.invoice_number == "INV-0001"
        assert restored.created_at == datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
        assert restored.items[0].discounted_rate == 80.0

    def test_record_keys(self, make_snapshot) -> None:
        record = make_snapshot().to_record()

        assert set(record) == {
            "invoiceNumber",
            "userId",
            "items",
            "billDiscount",
            "subtotal",
            "itemDiscounts",
            "billDiscountAmount",
            "totalDiscount",
            "totalSavings",
            "total",
            "createdAt",
            "status",
        }
        assert record["createdAt"] == "2024-03-10T12:00:00+00:00"

    def test_naive_timestamp_read_as_utc(self, make_snapshot) -> None:
        record = make_snapshot().to_record()
        record["createdAt"] = "2024-03-10T12:00:00"

        restored = InvoiceSnapshot.from_record(record)

        assert restored.created_at == datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestCompanyProfile:
    """Tests for company profile records."""

    def test_record_uses_stored_keys(self) -> None:
        profile = CompanyProfile(name="Acme", bank_name="First Bank", upi_id="acme@upi")

        record = profile.to_record()

        assert record["name"] == "Acme"
        assert record["bankName"] == "First Bank"
        assert record["upiId"] == "acme@upi"
        assert "bank_name" not in record

    def test_from_record_fills_missing_and_ignores_unknown(self) -> None:
        profile = CompanyProfile.from_record({"name": "Acme", "ifscCode": "ABCD0001", "logo": "x.png"})

        assert profile.name == "Acme"
        assert profile.ifsc_code == "ABCD0001"
        assert profile.address == ""

    def test_record_keys_order(self) -> None:
        assert CompanyProfile.record_keys()[:2] == ["name", "address"]
        assert CompanyProfile.record_keys()[-1] == "additionalInfo"


class TestFormatCurrency:
    """Tests for display formatting."""

    def test_two_decimals(self) -> None:
        assert format_currency(72) == "72.00"
        assert format_currency(8.5, "$") == "$8.50"

    def test_negative_amounts(self) -> None:
        assert format_currency(-400, "₹") == "-₹400.00"
