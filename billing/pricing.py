"""Invoice pricing: subtotal, line discounts, bill discount and totals.

Every function here is a pure function of its arguments. Amounts are plain
floats and are never rounded; rounding is left to whatever displays them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from billing.models.invoice import BillDiscount, DiscountType, LineItem


@dataclass(frozen=True)
class PricingSummary:
    subtotal: float
    item_discounts: float
    bill_discount_amount: float
    total_discount: float
    total_savings: float
    total: float


def effective_rate(item: LineItem) -> float:
    return item.effective_rate


def subtotal(items: Iterable[LineItem]) -> float:
    """Sticker price: quantity times the undiscounted rate."""
    return sum((item.quantity * item.rate for item in items), 0.0)


def item_discount_total(items: Iterable[LineItem]) -> float:
    """Savings from per-line discounted rates."""
    return sum(
        (item.quantity * item.rate - item.quantity * effective_rate(item) for item in items),
        0.0,
    )


def bill_discount_amount(items: Iterable[LineItem], discount: BillDiscount) -> float:
    """Whole-bill discount, applied after the line discounts.

    A flat amount is taken verbatim and may exceed what is left to pay.
    """
    items = list(items)
    after_item_discounts = subtotal(items) - item_discount_total(items)
    if discount.type is DiscountType.PERCENTAGE:
        return after_item_discounts * discount.value / 100
    return float(discount.value)


def total_discount(items: Iterable[LineItem], discount: BillDiscount) -> float:
    items = list(items)
    return item_discount_total(items) + bill_discount_amount(items, discount)


def total_savings(items: Iterable[LineItem], discount: BillDiscount) -> float:
    # Same quantity as total_discount; stored separately on every invoice.
    return total_discount(items, discount)


def grand_total(items: Iterable[LineItem], discount: BillDiscount) -> float:
    items = list(items)
    return subtotal(items) - total_discount(items, discount)


def summarize(items: Iterable[LineItem], discount: BillDiscount) -> PricingSummary:
    items = list(items)
    return PricingSummary(
        subtotal=subtotal(items),
        item_discounts=item_discount_total(items),
        bill_discount_amount=bill_discount_amount(items, discount),
        total_discount=total_discount(items, discount),
        total_savings=total_savings(items, discount),
        total=grand_total(items, discount),
    )
