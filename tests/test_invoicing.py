"""Tests for invoice creation through the service."""

from datetime import datetime, timezone

import pytest

from billing.errors import DuplicateInvoiceNumberError, ValidationError
from billing.models.invoice import BillDiscount, DiscountType, LineItem
from billing.services.invoicing import InvoiceService


class RacingStore:
    """In-memory store where another writer claims numbers first."""

    def __init__(self, stolen: int) -> None:
        self.numbers = []
        self.snapshots = []
        self.stolen = stolen
        self.attempts = 0

    def last_invoice_number(self, account_id):
        return self.numbers[-1] if self.numbers else None

    def append_invoice(self, snapshot):
        self.attempts += 1
        if self.stolen:
            self.stolen -= 1
            self.numbers.append(snapshot.invoice_number)
            raise DuplicateInvoiceNumberError(snapshot.invoice_number, snapshot.account_id)
        self.numbers.append(snapshot.invoice_number)
        self.snapshots.append(snapshot)
        return f"rec-{len(self.snapshots)}"


class TestCreateInvoice:
    """Tests for pricing, numbering and storing invoices."""

    def test_numbers_increase_per_account(self, repo, items) -> None:
        """Test each account gets its own sequence starting at INV-0001."""
        service = InvoiceService(repo)
        discount = BillDiscount()

        first = service.create_invoice("acct-1", items, discount)
        second = service.create_invoice("acct-1", items, discount)
        other = service.create_invoice("acct-2", items, discount)

        assert first.invoice_number == "INV-0001"
        assert second.invoice_number == "INV-0002"
        assert other.invoice_number == "INV-0001"
        assert service.next_number("acct-1") == "INV-0003"

    def test_stored_snapshot(self, repo, items) -> None:
        """Test the returned snapshot carries totals and the record id."""
        created_at = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
        service = InvoiceService(repo)

        invoice = service.create_invoice(
            "acct-1", items, BillDiscount(DiscountType.PERCENTAGE, 10), created_at=created_at
        )

        assert invoice.record_id is not None
        assert invoice.subtotal == 220.0
        assert invoice.item_discounts == 20.0
        assert invoice.total == pytest.approx(180.0)
        assert repo.list_invoices("acct-1") == [invoice]

    def test_listed_items_are_immutable(self, repo, items) -> None:
        """Test invoices read back from the store cannot be edited."""
        InvoiceService(repo).create_invoice("acct-1", items, BillDiscount())

        stored = repo.list_invoices("acct-1")[0]

        with pytest.raises(AttributeError):
            stored.items[0].quantity = 100
        assert stored.items[0].amount + stored.items[1].amount == stored.subtotal - stored.item_discounts

    def test_empty_invoice_rejected(self, repo) -> None:
        with pytest.raises(ValidationError) as exc_info:
            InvoiceService(repo).create_invoice("acct-1", [], BillDiscount())

        assert exc_info.value.field == "items"
        assert repo.last_invoice_number("acct-1") is None

    def test_negative_quantity_rejected(self, repo) -> None:
        with pytest.raises(ValidationError):
            InvoiceService(repo).create_invoice(
                "acct-1", [LineItem(name="Pen", quantity=-1, rate=5)], BillDiscount()
            )

    def test_negative_discount_rejected(self, repo, items) -> None:
        with pytest.raises(ValidationError):
            InvoiceService(repo).create_invoice("acct-1", items, BillDiscount(DiscountType.AMOUNT, -5))

    def test_oversized_discount_is_allowed(self, repo, items) -> None:
        invoice = InvoiceService(repo).create_invoice(
            "acct-1", items, BillDiscount(DiscountType.AMOUNT, 1000)
        )

        assert invoice.total == -800.0


class TestNumberRetries:
    """Tests for retrying when another writer takes the number."""

    def test_retries_with_next_number(self, items) -> None:
        """Test a taken number is skipped and the next one is used."""
        store = RacingStore(stolen=1)

        invoice = InvoiceService(store, max_attempts=3).create_invoice("acct-1", items, BillDiscount())

        assert invoice.invoice_number == "INV-0002"
        assert invoice.record_id == "rec-1"
        assert store.attempts == 2

    def test_gives_up_after_max_attempts(self, items) -> None:
        store = RacingStore(stolen=5)

        with pytest.raises(DuplicateInvoiceNumberError):
            InvoiceService(store, max_attempts=3).create_invoice("acct-1", items, BillDiscount())

        assert store.attempts == 3
        assert store.snapshots == []

    def test_default_attempts_from_config(self, repo, monkeypatch) -> None:
        monkeypatch.setattr("billing.config.MAX_NUMBER_ATTEMPTS", 7)

        assert InvoiceService(repo).max_attempts == 7
