"""Date-range invoice report with details, reprint and export."""

from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import QDate, Qt
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QTextBrowser,
    QVBoxLayout,
)

from billing import config
from billing.data.excel_repo import ExcelRepository
from billing.errors import BillingError
from billing.models.invoice import InvoiceSnapshot, format_currency
from billing.printing.receipt_printer import ReceiptPrinter
from billing.printing.templates import render_invoice_html
from billing.reports import (
    REPORT_HEADERS,
    DateRange,
    PeriodReport,
    build_period_report,
    default_report_name,
    export_csv,
    export_workbook,
)
from billing.settings import PrinterSettings
from billing.utils.logging import get_logger

logger = get_logger(__name__)


class InvoiceDetailsDialog(QDialog):
    """Read-only view of a stored invoice with a reprint button."""

    def __init__(self, invoice: InvoiceSnapshot, repo: ExcelRepository, account_id: str,
                 printer: ReceiptPrinter, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"Invoice Details - {invoice.invoice_number}")
        self.resize(520, 640)
        self.invoice = invoice
        self.repo = repo
        self.account_id = account_id
        self.printer = printer

        self.settings = PrinterSettings.load(repo.load_printer_settings(account_id))
        self.company = repo.load_company(account_id)

        browser = QTextBrowser()
        browser.setHtml(render_invoice_html(invoice, self.settings, self.company))

        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        print_button = buttons.addButton("Print", QDialogButtonBox.ActionRole)
        print_button.clicked.connect(self._print)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout()
        layout.addWidget(browser)
        layout.addWidget(buttons)
        self.setLayout(layout)

    def _print(self) -> None:
        if not self.printer.print_invoice(self.invoice, self.settings, self.company):
            QMessageBox.critical(self, "Printer Error", "Printer not available.")


class ReportsDialog(QDialog):
    """List the account's invoices between two dates."""

    def __init__(self, repo: ExcelRepository, account_id: str, printer: ReceiptPrinter,
                 parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Reports")
        self.resize(760, 520)
        self.repo = repo
        self.account_id = account_id
        self.printer = printer
        self.report: Optional[PeriodReport] = None

        self.start_edit = self._date_edit()
        self.end_edit = self._date_edit()
        show_button = QPushButton("Show")
        show_button.clicked.connect(self._load)

        range_layout = QHBoxLayout()
        range_layout.addWidget(QLabel("From:"))
        range_layout.addWidget(self.start_edit)
        range_layout.addWidget(QLabel("To:"))
        range_layout.addWidget(self.end_edit)
        range_layout.addWidget(show_button)
        range_layout.addStretch()

        self.table = QTableWidget(0, len(REPORT_HEADERS))
        self.table.setHorizontalHeaderLabels(REPORT_HEADERS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.cellDoubleClicked.connect(lambda row, _col: self._show_details(row))

        self.totals_label = QLabel()

        self.details_button = QPushButton("View Details")
        self.details_button.clicked.connect(lambda: self._show_details(self.table.currentRow()))
        self.reprint_button = QPushButton("Reprint Selected")
        self.reprint_button.clicked.connect(self._reprint_selected)
        self.export_button = QPushButton("Download Report")
        self.export_button.clicked.connect(self._export)
        close_button = QPushButton("Close")
        close_button.clicked.connect(self.reject)

        buttons_layout = QHBoxLayout()
        buttons_layout.addWidget(self.totals_label)
        buttons_layout.addStretch()
        for button in (self.details_button, self.reprint_button, self.export_button, close_button):
            buttons_layout.addWidget(button)

        layout = QVBoxLayout()
        layout.addLayout(range_layout)
        layout.addWidget(self.table, 1)
        layout.addLayout(buttons_layout)
        self.setLayout(layout)

        self._load()

    @staticmethod
    def _date_edit() -> QDateEdit:
        edit = QDateEdit(QDate.currentDate())
        edit.setCalendarPopup(True)
        edit.setDisplayFormat("dd/MM/yyyy")
        return edit

    def _load(self) -> None:
        try:
            date_range = DateRange(self.start_edit.date().toPyDate(), self.end_edit.date().toPyDate())
            self.report = build_period_report(self.repo.list_invoices(self.account_id), date_range)
        except BillingError as exc:
            logger.error("Failed to load report", error=str(exc))
            QMessageBox.critical(self, "Report Error", f"Failed to load invoices: {exc}")
            return

        rows = self.report.rows()
        self.table.setRowCount(len(rows))
        for row_idx, row in enumerate(rows):
            for col, value in enumerate(row):
                cell = QTableWidgetItem(value)
                if col >= 2:
                    cell.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
                self.table.setItem(row_idx, col, cell)

        totals = self.report.totals
        symbol = config.CURRENCY_SYMBOL
        self.totals_label.setText(
            f"{totals.count} invoices | Subtotal {format_currency(totals.subtotal, symbol)}"
            f" | Discount {format_currency(totals.discount, symbol)}"
            f" | Total {format_currency(totals.total, symbol)}"
        )
        has_rows = bool(rows)
        for button in (self.details_button, self.reprint_button, self.export_button):
            button.setEnabled(has_rows)

    def _selected(self, row: int) -> Optional[InvoiceSnapshot]:
        if self.report is None or not 0 <= row < len(self.report.invoices):
            QMessageBox.information(self, "Reports", "Select an invoice first.")
            return None
        return self.report.invoices[row]

    def _show_details(self, row: int) -> None:
        invoice = self._selected(row)
        if invoice is None:
            return
        try:
            dialog = InvoiceDetailsDialog(invoice, self.repo, self.account_id, self.printer, self)
        except BillingError as exc:
            QMessageBox.critical(self, "Invoice Details", f"Failed to load printer settings: {exc}")
            return
        dialog.exec_()

    def _reprint_selected(self) -> None:
        invoice = self._selected(self.table.currentRow())
        if invoice is None:
            return
        try:
            settings = PrinterSettings.load(self.repo.load_printer_settings(self.account_id))
            company = self.repo.load_company(self.account_id)
        except BillingError as exc:
            logger.error("Failed to load print settings", error=str(exc))
            QMessageBox.critical(self, "Print Error", f"Failed to load printer settings: {exc}")
            return
        if not self.printer.print_invoice(invoice, settings, company):
            QMessageBox.critical(self, "Printer Error", "Printer not available.")

    def _export(self) -> None:
        if not self.report or not self.report.invoices:
            return
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Download Report",
            default_report_name(),
            "CSV Files (*.csv);;Excel Files (*.xlsx)",
        )
        if not path:
            return
        try:
            if path.lower().endswith(".xlsx"):
                export_workbook(self.report.invoices, path, self.report.date_range.tz)
            else:
                export_csv(self.report.invoices, path, self.report.date_range.tz)
        except BillingError as exc:
            logger.error("Failed to export report", error=str(exc))
            QMessageBox.critical(self, "Report Error", f"Failed to download report: {exc}")
            return
        QMessageBox.information(self, "Report", f"Exported {len(self.report.invoices)} invoices.")
