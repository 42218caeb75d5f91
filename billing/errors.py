"""Exceptions raised by the billing application."""


class BillingError(Exception):
    """Base exception for all billing errors."""

    pass


class ValidationError(BillingError):
    """Raised when an input field fails a required or non-negative constraint."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceError(BillingError):
    """Raised when the invoice store is unreachable or rejects a write."""

    pass


class DuplicateInvoiceNumberError(PersistenceError):
    """Raised when an invoice number is already taken for the account."""

    def __init__(self, invoice_number: str, account_id: str) -> None:
        super().__init__(
            f"Invoice number '{invoice_number}' already exists for account '{account_id}'."
        )
        self.invoice_number = invoice_number
        self.account_id = account_id


class ParseError(BillingError):
    """Raised when a stored invoice number has no integer suffix."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Cannot parse invoice number: {identifier!r}")
        self.identifier = identifier
