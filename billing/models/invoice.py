"""Invoice data models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from billing.errors import ValidationError

COMPLETED = "completed"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    AMOUNT = "amount"


@dataclass(frozen=True)
class LineItem:
    name: str = ""
    quantity: float = 0.0
    rate: float = 0.0
    discounted_rate: float = 0.0

    @property
    def effective_rate(self) -> float:
        # A discounted rate of 0 means "no override".
        return self.discounted_rate if self.discounted_rate > 0 else self.rate

    @property
    def amount(self) -> float:
        return self.quantity * self.effective_rate

    def validate(self) -> None:
        """Raise ValidationError when a numeric field is negative."""
        for name in ("quantity", "rate", "discounted_rate"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must not be negative.", field=name)

    def to_record(self) -> Dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "rate": self.rate,
            "discountedRate": self.discounted_rate,
            "amount": self.amount,
        }

    @classmethod
    def from_record(cls, record: Dict) -> "LineItem":
        return cls(
            name=str(record.get("name") or ""),
            quantity=to_float(record.get("quantity")),
            rate=to_float(record.get("rate")),
            discounted_rate=to_float(record.get("discountedRate")),
        )


@dataclass(frozen=True)
class BillDiscount:
    type: DiscountType = DiscountType.PERCENTAGE
    value: float = 0.0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "type", DiscountType(self.type))
        except ValueError:
            raise ValidationError(f"Unknown discount type: {self.type!r}", field="type") from None

    def validate(self) -> None:
        # Percentages above 100 are accepted as entered.
        if self.value < 0:
            raise ValidationError("Bill discount must not be negative.", field="value")

    def to_record(self) -> Dict:
        return {"type": self.type.value, "value": self.value}

    @classmethod
    def from_record(cls, record: Optional[Dict]) -> "BillDiscount":
        if not record:
            return cls()
        return cls(
            type=record.get("type") or DiscountType.PERCENTAGE,
            value=to_float(record.get("value")),
        )


@dataclass(frozen=True)
class InvoiceSnapshot:
    """Fully computed invoice as persisted at save time.

    The aggregates are stored redundantly so that past invoices keep the
    values they were issued with.
    """

    invoice_number: str
    account_id: str
    items: Tuple[LineItem, ...]
    bill_discount: BillDiscount
    subtotal: float
    item_discounts: float
    bill_discount_amount: float
    total_discount: float
    total_savings: float
    total: float
    created_at: datetime
    status: str = COMPLETED
    record_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        invoice_number: str,
        account_id: str,
        items: Iterable[LineItem],
        bill_discount: BillDiscount,
        created_at: Optional[datetime] = None,
    ) -> "InvoiceSnapshot":
        # Imported here; pricing depends on this module's types.
        from billing.pricing import summarize

        line_items = tuple(items)
        summary = summarize(line_items, bill_discount)
        return cls(
            invoice_number=invoice_number,
            account_id=account_id,
            items=line_items,
            bill_discount=bill_discount,
            subtotal=summary.subtotal,
            item_discounts=summary.item_discounts,
            bill_discount_amount=summary.bill_discount_amount,
            total_discount=summary.total_discount,
            total_savings=summary.total_savings,
            total=summary.total,
            created_at=created_at or datetime.now(timezone.utc),
        )

    def with_record_id(self, record_id: str) -> "InvoiceSnapshot":
        return replace(self, record_id=record_id)

    def to_record(self) -> Dict:
        return {
            "invoiceNumber": self.invoice_number,
            "userId": self.account_id,
            "items": [item.to_record() for item in self.items],
            "billDiscount": self.bill_discount.to_record(),
            "subtotal": self.subtotal,
            "itemDiscounts": self.item_discounts,
            "billDiscountAmount": self.bill_discount_amount,
            "totalDiscount": self.total_discount,
            "totalSavings": self.total_savings,
            "total": self.total,
            "createdAt": self.created_at.isoformat(),
            "status": self.status,
        }

    @classmethod
    def from_record(cls, record: Dict, record_id: Optional[str] = None) -> "InvoiceSnapshot":
        """Restore a stored invoice without recomputing its totals."""
        return cls(
            invoice_number=str(record["invoiceNumber"]),
            account_id=str(record.get("userId") or ""),
            items=tuple(LineItem.from_record(item) for item in record.get("items", [])),
            bill_discount=BillDiscount.from_record(record.get("billDiscount")),
            subtotal=to_float(record.get("subtotal")),
            item_discounts=to_float(record.get("itemDiscounts")),
            bill_discount_amount=to_float(record.get("billDiscountAmount")),
            total_discount=to_float(record.get("totalDiscount")),
            total_savings=to_float(record.get("totalSavings")),
            total=to_float(record.get("total")),
            created_at=parse_timestamp(record["createdAt"]),
            status=str(record.get("status") or COMPLETED),
            record_id=record_id,
        )


def parse_timestamp(value) -> datetime:
    """Return an aware datetime; naive values are taken as UTC."""
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def to_float(value, default: float = 0.0) -> float:
    """Coerce a stored cell or document value; blanks and junk give ``default``."""
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def format_currency(amount: float, symbol: str = "") -> str:
    """Return amount formatted to two decimals."""
    if amount < 0:
        return f"-{symbol}{-amount:.2f}"
    return f"{symbol}{amount:.2f}"
