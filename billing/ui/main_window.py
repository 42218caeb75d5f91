"""PyQt5 invoice editor for the billing desk."""

from __future__ import annotations

from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QDoubleSpinBox,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from billing import config
from billing.data.excel_repo import ExcelRepository
from billing.errors import BillingError
from billing.models.invoice import BillDiscount, DiscountType, LineItem, format_currency
from billing.pricing import summarize
from billing.printing.receipt_printer import ReceiptPrinter
from billing.services.invoicing import InvoiceService
from billing.settings import PrinterSettings
from billing.ui.reports_dialog import ReportsDialog
from billing.ui.settings_dialogs import CompanyDialog, PrinterSettingsDialog
from billing.utils.logging import get_logger

logger = get_logger(__name__)

COLUMNS = ["Item Name", "Quantity", "Rate", "Discounted Rate", "Amount"]
NAME_COL, QTY_COL, RATE_COL, DISCOUNTED_COL, AMOUNT_COL = range(len(COLUMNS))
MAX_VALUE = 1_000_000_000


def _money(amount: float) -> str:
    return format_currency(amount, config.CURRENCY_SYMBOL)


class MainWindow(QMainWindow):
    """Create, save and print invoices."""

    def __init__(self, account_id: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle(config.STORE_HEADER)
        self.resize(1000, 640)

        self.account_id = account_id or config.ACCOUNT_ID
        self.repo: Optional[ExcelRepository] = None
        self.service: Optional[InvoiceService] = None
        self.printer = ReceiptPrinter()

        self._build_ui()
        self._load_store()
        self._reset_form()

    def _build_ui(self) -> None:
        root = QWidget()
        main_layout = QVBoxLayout()

        header = QHBoxLayout()
        title = QLabel("Create Invoice")
        title_font = QFont()
        title_font.setPointSize(14)
        title_font.setBold(True)
        title.setFont(title_font)
        self.number_label = QLabel("Invoice #: -")
        self.company_button = QPushButton("Company Settings")
        self.company_button.clicked.connect(self._edit_company)
        self.printer_button = QPushButton("Printer Settings")
        self.printer_button.clicked.connect(self._edit_printer_settings)
        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.number_label)
        header.addWidget(self.company_button)
        header.addWidget(self.printer_button)
        main_layout.addLayout(header)

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        main_layout.addWidget(self.table, 1)

        rows_layout = QHBoxLayout()
        self.add_button = QPushButton("Add Item")
        self.add_button.clicked.connect(self._add_row)
        self.delete_button = QPushButton("Delete Item")
        self.delete_button.clicked.connect(self._delete_row)
        rows_layout.addWidget(self.add_button)
        rows_layout.addWidget(self.delete_button)
        rows_layout.addStretch()
        main_layout.addLayout(rows_layout)

        main_layout.addLayout(self._build_bottom_panel())
        root.setLayout(main_layout)
        self.setCentralWidget(root)

    def _build_bottom_panel(self) -> QHBoxLayout:
        bottom = QHBoxLayout()

        totals_group = QGroupBox("Totals")
        totals_layout = QGridLayout()

        self.discount_type = QComboBox()
        self.discount_type.addItem("Percentage", DiscountType.PERCENTAGE)
        self.discount_type.addItem("Amount", DiscountType.AMOUNT)
        self.discount_type.currentIndexChanged.connect(self._update_totals)
        self.discount_value = QDoubleSpinBox()
        self.discount_value.setRange(0, MAX_VALUE)
        self.discount_value.setDecimals(2)
        self.discount_value.valueChanged.connect(self._update_totals)

        self.subtotal_label = QLabel("0.00")
        self.bill_discount_label = QLabel("0.00")
        self.total_discount_label = QLabel("0.00")
        self.savings_label = QLabel("0.00")
        self.total_label = QLabel("0.00")
        total_font = QFont()
        total_font.setPointSize(16)
        total_font.setBold(True)
        self.total_label.setFont(total_font)

        totals_layout.addWidget(QLabel("Subtotal:"), 0, 0)
        totals_layout.addWidget(self.subtotal_label, 0, 3, Qt.AlignRight)
        totals_layout.addWidget(QLabel("Additional Discount:"), 1, 0)
        totals_layout.addWidget(self.discount_type, 1, 1)
        totals_layout.addWidget(self.discount_value, 1, 2)
        totals_layout.addWidget(self.bill_discount_label, 1, 3, Qt.AlignRight)
        totals_layout.addWidget(QLabel("Total Discount:"), 2, 0)
        totals_layout.addWidget(self.total_discount_label, 2, 3, Qt.AlignRight)
        totals_layout.addWidget(QLabel("Total Savings:"), 3, 0)
        totals_layout.addWidget(self.savings_label, 3, 3, Qt.AlignRight)
        totals_layout.addWidget(QLabel("Total:"), 4, 0)
        totals_layout.addWidget(self.total_label, 4, 3, Qt.AlignRight)
        totals_group.setLayout(totals_layout)

        buttons_layout = QVBoxLayout()
        self.save_button = QPushButton("Save Bill")
        self.save_button.clicked.connect(lambda: self._on_save(print_after=False))
        self.print_button = QPushButton("Save && Print")
        self.print_button.clicked.connect(lambda: self._on_save(print_after=True))
        self.report_button = QPushButton("Reports")
        self.report_button.clicked.connect(self._open_reports)
        buttons_layout.addWidget(self.save_button)
        buttons_layout.addWidget(self.print_button)
        buttons_layout.addWidget(self.report_button)
        buttons_layout.addStretch()

        bottom.addWidget(totals_group, 1)
        bottom.addLayout(buttons_layout)
        return bottom

    def _load_store(self) -> None:
        try:
            self.repo = ExcelRepository()
            self.service = InvoiceService(self.repo)
        except BillingError as exc:
            logger.error("Failed to open billing workbook", error=str(exc))
            QMessageBox.critical(self, "Storage Error", f"Failed to load workbook: {exc}")
            for button in (self.save_button, self.print_button, self.report_button,
                           self.company_button, self.printer_button):
                button.setEnabled(False)

    def _refresh_number(self) -> None:
        if not self.service:
            return
        try:
            number = self.service.next_number(self.account_id)
        except BillingError as exc:
            logger.error("Failed to generate invoice number", error=str(exc))
            QMessageBox.warning(self, "Invoice Number", "Failed to generate invoice number.")
            return
        self.number_label.setText(f"Invoice #: {number}")

    # Item rows

    def _spin(self, minimum: float = 0.0) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(minimum, MAX_VALUE)
        spin.setDecimals(2)
        spin.valueChanged.connect(self._on_row_changed)
        return spin

    def _add_row(self) -> None:
        row = self.table.rowCount()
        self.table.insertRow(row)
        name = QLineEdit()
        name.setPlaceholderText("Enter item name")
        self.table.setCellWidget(row, NAME_COL, name)
        for col in (QTY_COL, RATE_COL, DISCOUNTED_COL):
            self.table.setCellWidget(row, col, self._spin())
        amount = QTableWidgetItem(_money(0.0))
        amount.setFlags(amount.flags() & ~Qt.ItemIsEditable)
        self.table.setItem(row, AMOUNT_COL, amount)
        self._update_row_buttons()

    def _delete_row(self) -> None:
        if self.table.rowCount() <= 1:
            return
        row = self.table.currentRow()
        if row < 0:
            row = self.table.rowCount() - 1
        self.table.removeRow(row)
        self._update_row_buttons()
        self._update_totals()

    def _update_row_buttons(self) -> None:
        self.delete_button.setEnabled(self.table.rowCount() > 1)

    def _row_item(self, row: int) -> LineItem:
        return LineItem(
            name=self.table.cellWidget(row, NAME_COL).text().strip(),
            quantity=self.table.cellWidget(row, QTY_COL).value(),
            rate=self.table.cellWidget(row, RATE_COL).value(),
            discounted_rate=self.table.cellWidget(row, DISCOUNTED_COL).value(),
        )

    def _items(self) -> List[LineItem]:
        return [self._row_item(row) for row in range(self.table.rowCount())]

    def _discount(self) -> BillDiscount:
        return BillDiscount(
            type=DiscountType(self.discount_type.currentData()), value=self.discount_value.value()
        )

    def _on_row_changed(self) -> None:
        for row in range(self.table.rowCount()):
            self.table.item(row, AMOUNT_COL).setText(_money(self._row_item(row).amount))
        self._update_totals()

    def _update_totals(self) -> None:
        summary = summarize(self._items(), self._discount())
        self.subtotal_label.setText(_money(summary.subtotal))
        self.bill_discount_label.setText(f"-{_money(summary.bill_discount_amount)}")
        self.total_discount_label.setText(f"-{_money(summary.total_discount)}")
        self.savings_label.setText(_money(summary.total_savings))
        self.total_label.setText(_money(summary.total))

    # Actions

    def _on_save(self, print_after: bool) -> None:
        if not self.service:
            QMessageBox.warning(self, "Storage not loaded", "Cannot save without the workbook.")
            return

        try:
            invoice = self.service.create_invoice(self.account_id, self._items(), self._discount())
        except BillingError as exc:
            logger.error("Failed to save invoice", error=str(exc))
            QMessageBox.critical(self, "Save Error", f"Failed to save invoice: {exc}")
            return

        if print_after:
            try:
                settings = PrinterSettings.load(self.repo.load_printer_settings(self.account_id))
                company = self.repo.load_company(self.account_id)
            except BillingError as exc:
                logger.error("Failed to load print settings", error=str(exc))
                QMessageBox.critical(self, "Print Error", f"Failed to load printer settings: {exc}")
                settings = None
            if settings and not self.printer.print_invoice(invoice, settings, company):
                QMessageBox.critical(self, "Printer Error", "Printer not available.")

        QMessageBox.information(self, "Saved", f"Invoice {invoice.invoice_number} saved successfully!")
        self._reset_form()

    def _reset_form(self) -> None:
        self.table.setRowCount(0)
        self._add_row()
        self.discount_type.setCurrentIndex(0)
        self.discount_value.setValue(0.0)
        self._update_totals()
        self._refresh_number()

    def _open_reports(self) -> None:
        if not self.repo:
            return
        ReportsDialog(self.repo, self.account_id, self.printer, self).exec_()


    def _edit_company(self) -> None:
        try:
            profile = self.repo.load_company(self.account_id)
        except BillingError as exc:
            QMessageBox.critical(self, "Company Error", f"Failed to load company data: {exc}")
            return
        dialog = CompanyDialog(profile, self)
        if dialog.exec_():
            try:
                self.repo.save_company(self.account_id, dialog.profile())
            except BillingError as exc:
                logger.error("Failed to save company profile", error=str(exc))
                QMessageBox.critical(self, "Company Error", f"Failed to save company data: {exc}")

    def _edit_printer_settings(self) -> None:
        try:
            settings = PrinterSettings.load(self.repo.load_printer_settings(self.account_id))
        except BillingError as exc:
            QMessageBox.critical(self, "Printer Settings", f"Failed to load settings: {exc}")
            return
        dialog = PrinterSettingsDialog(settings, self)
        if dialog.exec_():
            try:
                self.repo.save_printer_settings(self.account_id, dialog.settings().to_document())
            except BillingError as exc:
                logger.error("Failed to save printer settings", error=str(exc))
                QMessageBox.critical(self, "Printer Settings", f"Failed to save printer settings: {exc}")
