"""Date-range invoice reports with CSV and Excel export."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from openpyxl import Workbook

from billing.errors import PersistenceError, ValidationError
from billing.models.invoice import InvoiceSnapshot
from billing.utils.logging import get_logger

logger = get_logger(__name__)

REPORT_HEADERS = ["Date", "Invoice Number", "Subtotal", "Discount", "Total"]


@dataclass(frozen=True)
class DateRange:
    """Whole calendar days, both ends included."""

    start: date
    end: date
    tz: Optional[tzinfo] = None

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("Report range ends before it starts.", field="end")

    @classmethod
    def today(cls, today: Optional[date] = None, tz: Optional[tzinfo] = None) -> "DateRange":
        day = today or datetime.now(tz).date()
        return cls(day, day, tz)

    def contains(self, moment: datetime) -> bool:
        local = _local(moment, self.tz)
        return (
            datetime.combine(self.start, time.min)
            <= local
            <= datetime.combine(self.end, time.max)
        )


@dataclass(frozen=True)
class ReportTotals:
    count: int
    subtotal: float
    discount: float
    total: float


def filter_invoices(invoices: Iterable[InvoiceSnapshot], date_range: DateRange) -> List[InvoiceSnapshot]:
    """Invoices created within the range, newest first."""
    matching = [invoice for invoice in invoices if date_range.contains(invoice.created_at)]
    return sorted(matching, key=lambda invoice: invoice.created_at, reverse=True)


def report_rows(invoices: Iterable[InvoiceSnapshot], tz: Optional[tzinfo] = None) -> List[List[str]]:
    rows = []
    for invoice in invoices:
        created = _local(invoice.created_at, tz)
        rows.append(
            [
                created.strftime("%d/%m/%Y"),
                invoice.invoice_number,
                f"{invoice.subtotal:.2f}",
                f"{invoice.total_discount:.2f}",
                f"{invoice.total:.2f}",
            ]
        )
    return rows


def _local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    """Naive wall-clock time in ``tz`` (the machine's zone when None)."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def summarize_period(invoices: Iterable[InvoiceSnapshot]) -> ReportTotals:
    invoices = list(invoices)
    return ReportTotals(
        count=len(invoices),
        subtotal=sum((invoice.subtotal for invoice in invoices), 0.0),
        discount=sum((invoice.total_discount for invoice in invoices), 0.0),
        total=sum((invoice.total for invoice in invoices), 0.0),
    )


@dataclass(frozen=True)
class PeriodReport:
    """Invoices of one date range, newest first, with their sums."""

    date_range: DateRange
    invoices: Tuple[InvoiceSnapshot, ...]
    totals: ReportTotals

    def rows(self) -> List[List[str]]:
        return report_rows(self.invoices, self.date_range.tz)


def build_period_report(invoices: Iterable[InvoiceSnapshot], date_range: DateRange) -> PeriodReport:
    selected = filter_invoices(invoices, date_range)
    return PeriodReport(date_range=date_range, invoices=tuple(selected), totals=summarize_period(selected))


def default_report_name(today: Optional[date] = None, suffix: str = "csv") -> str:
    return f"invoices_{(today or date.today()).strftime('%d-%m-%Y')}.{suffix}"


def export_csv(
    invoices: Iterable[InvoiceSnapshot], path: Path | str, tz: Optional[tzinfo] = None
) -> Path:
    path = Path(path)
    rows = report_rows(invoices, tz)
    try:
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(REPORT_HEADERS)
            writer.writerows(rows)
    except OSError as exc:
        raise PersistenceError(f"Cannot write report {path}: {exc}") from exc
    logger.info("Report exported", path=str(path), rows=len(rows), format="csv")
    return path


def export_workbook(
    invoices: Iterable[InvoiceSnapshot], path: Path | str, tz: Optional[tzinfo] = None
) -> Path:
    """Write the report to an .xlsx file with numeric amount cells."""
    path = Path(path)
    invoices = list(invoices)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Invoices"
    sheet.append(REPORT_HEADERS)
    for invoice, row in zip(invoices, report_rows(invoices, tz)):
        sheet.append(
            [row[0], row[1], round(invoice.subtotal, 2), round(invoice.total_discount, 2), round(invoice.total, 2)]
        )
    for cells in sheet.iter_rows(min_row=2, min_col=3, max_col=5):
        for cell in cells:
            cell.number_format = "0.00"
    try:
        workbook.save(path)
    except OSError as exc:
        raise PersistenceError(f"Cannot write report {path}: {exc}") from exc
    logger.info("Report exported", path=str(path), rows=len(invoices), format="xlsx")
    return path
