"""Sequential invoice numbers of the form ``INV-0001``."""

from __future__ import annotations

from typing import Iterable, Optional

from billing.errors import ParseError
from billing.utils.logging import get_logger

logger = get_logger(__name__)

INVOICE_PREFIX = "INV"
NUMBER_WIDTH = 4


def format_invoice_number(number: int) -> str:
    """Zero-pad to at least four digits; wider numbers are kept whole."""
    return f"{INVOICE_PREFIX}-{number:0{NUMBER_WIDTH}d}"


def parse_invoice_number(identifier: str) -> int:
    """Return the integer after the last ``-``; raise ParseError otherwise."""
    suffix = str(identifier).rsplit("-", 1)[-1].strip()
    if not suffix.isdecimal():
        raise ParseError(identifier)
    return int(suffix)


def _sequence_value(identifier: str) -> int:
    try:
        return parse_invoice_number(identifier)
    except ParseError:
        logger.warning("Malformed invoice number treated as 0", identifier=identifier)
        return 0


def next_invoice_number(previous: Optional[str]) -> str:
    """Return the identifier that follows ``previous`` (or ``INV-0001``)."""
    last = _sequence_value(previous) if previous else 0
    return format_invoice_number(last + 1)


def highest_invoice_number(identifiers: Iterable[str]) -> Optional[str]:
    """Return the identifier with the largest numeric suffix, if any."""
    highest: Optional[str] = None
    highest_value = -1
    for identifier in identifiers:
        value = _sequence_value(identifier)
        if value > highest_value:
            highest, highest_value = identifier, value
    return highest
