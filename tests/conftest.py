"""Shared fixtures for billing tests."""

from datetime import datetime, timezone

import pytest

from billing.data.excel_repo import ExcelRepository
from billing.models.invoice import BillDiscount, DiscountType, InvoiceSnapshot, LineItem


@pytest.fixture
def repo(tmp_path):
    return ExcelRepository(tmp_path / "billing.xlsx")


@pytest.fixture
def items():
    return [
        LineItem(name="Notebook", quantity=2, rate=50.0),
        LineItem(name="Pen", quantity=10, rate=12.0, discounted_rate=10.0),
    ]


@pytest.fixture
def make_snapshot():
    def _make(number="INV-0001", account_id="acct-1", created_at=None, items=None, discount=None):
        return InvoiceSnapshot.build(
            number,
            account_id,
            items if items is not None else [LineItem(name="Widget", quantity=1, rate=100.0, discounted_rate=80.0)],
            discount or BillDiscount(DiscountType.PERCENTAGE, 10),
            created_at or datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc),
        )

    return _make
