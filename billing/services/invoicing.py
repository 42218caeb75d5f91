"""Invoice assembly: number allocation, pricing snapshot and storage."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Protocol

from billing import config
from billing.errors import DuplicateInvoiceNumberError, ValidationError
from billing.models.invoice import BillDiscount, InvoiceSnapshot, LineItem
from billing.numbering import next_invoice_number
from billing.utils.logging import get_logger

logger = get_logger(__name__)


class InvoiceStore(Protocol):
    def last_invoice_number(self, account_id: str) -> Optional[str]: ...

    def append_invoice(self, snapshot: InvoiceSnapshot) -> str: ...


class InvoiceService:
    """Creates invoices against an append-only store.

    The store rejects a number already issued for the account; the service
    then re-reads the last number and tries again, up to ``max_attempts``.
    """

    def __init__(self, store: InvoiceStore, max_attempts: int | None = None) -> None:
        self.store = store
        self.max_attempts = max_attempts or config.MAX_NUMBER_ATTEMPTS

    def next_number(self, account_id: str) -> str:
        return next_invoice_number(self.store.last_invoice_number(account_id))

    def create_invoice(
        self,
        account_id: str,
        items: Iterable[LineItem],
        discount: BillDiscount,
        created_at: Optional[datetime] = None,
    ) -> InvoiceSnapshot:
        """Price, number and store a new invoice; return the stored snapshot."""
        line_items: List[LineItem] = list(items)
        if not line_items:
            raise ValidationError("An invoice needs at least one item.", field="items")
        for item in line_items:
            item.validate()
        discount.validate()

        attempt = 0
        while True:
            attempt += 1
            number = self.next_number(account_id)
            snapshot = InvoiceSnapshot.build(number, account_id, line_items, discount, created_at)
            try:
                record_id = self.store.append_invoice(snapshot)
            except DuplicateInvoiceNumberError:
                if attempt >= self.max_attempts:
                    logger.error(
                        "Giving up on invoice number allocation",
                        account_id=account_id,
                        invoice_number=number,
                        attempts=attempt,
                    )
                    raise
                logger.warning(
                    "Invoice number already taken, retrying",
                    account_id=account_id,
                    invoice_number=number,
                    attempt=attempt,
                )
                continue

            logger.info(
                "Invoice created",
                account_id=account_id,
                invoice_number=number,
                total=snapshot.total,
                item_count=len(line_items),
            )
            return snapshot.with_record_id(record_id)
