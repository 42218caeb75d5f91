"""Excel workbook used as the document store for invoices and settings."""

from __future__ import annotations

import json
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from billing import config
from billing.errors import DuplicateInvoiceNumberError, PersistenceError
from billing.models.company import CompanyProfile
from billing.models.invoice import InvoiceSnapshot, to_float
from billing.numbering import highest_invoice_number
from billing.utils.logging import get_logger

logger = get_logger(__name__)

INVOICES_SHEET = "Invoices"
ITEMS_SHEET = "InvoiceItems"
COMPANIES_SHEET = "Companies"
SETTINGS_SHEET = "PrinterSettings"

INVOICE_COLUMNS = [
    "Record_ID",
    "Invoice_Number",
    "Account_ID",
    "Created_At",
    "Status",
    "Subtotal",
    "Item_Discounts",
    "Bill_Discount_Amount",
    "Total_Discount",
    "Total_Savings",
    "Total",
    "Discount_Type",
    "Discount_Value",
]
ITEM_COLUMNS = ["Record_ID", "Position", "Name", "Quantity", "Rate", "Discounted_Rate", "Amount"]
COMPANY_COLUMNS = ["Account_ID"] + CompanyProfile.record_keys()
SETTINGS_COLUMNS = ["Account_ID", "Document"]

SHEETS: Dict[str, List[str]] = {
    INVOICES_SHEET: INVOICE_COLUMNS,
    ITEMS_SHEET: ITEM_COLUMNS,
    COMPANIES_SHEET: COMPANY_COLUMNS,
    SETTINGS_SHEET: SETTINGS_COLUMNS,
}


@dataclass
class _Sheet:
    """A worksheet with its header name to column index map."""

    worksheet: Worksheet
    columns: Dict[str, int]

    def value(self, row, column: str):
        return row[self.columns[column] - 1].value

    def append(self, record: Dict) -> int:
        """Append a row and return its index."""
        values = [None] * max(self.columns.values())
        for column, idx in self.columns.items():
            values[idx - 1] = record.get(column)
        self.worksheet.append(values)
        return self.worksheet.max_row

    def rows(self):
        for row in self.worksheet.iter_rows(min_row=2):
            if all(cell.value in (None, "") for cell in row):
                continue
            yield row


class ExcelRepository:
    """Reads and appends invoices, company profiles and printer settings.

    Invoices are append-only. Company profiles and printer settings are
    upserted per account. Writes are serialized and saved immediately.
    """

    def __init__(self, path: Path | str = None) -> None:
        self.path: Path = Path(path) if path else config.WORKBOOK_PATH
        self._lock = threading.RLock()
        self._workbook = self._open()
        self._sheets = {name: self._detect_columns(name) for name in SHEETS}

    def _open(self) -> Workbook:
        if not self.path.exists():
            return self._create()
        try:
            return load_workbook(self.path)
        except (OSError, BadZipFile, InvalidFileException) as exc:
            raise PersistenceError(f"Cannot open workbook {self.path}: {exc}") from exc

    def _create(self) -> Workbook:
        logger.info("Creating billing workbook", path=str(self.path))
        workbook = Workbook()
        workbook.remove(workbook.active)
        for name, columns in SHEETS.items():
            workbook.create_sheet(name).append(columns)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(self.path)
        except OSError as exc:
            raise PersistenceError(f"Cannot create workbook {self.path}: {exc}") from exc
        return workbook

    def _detect_columns(self, sheet_name: str) -> _Sheet:
        """Map header names to column indexes; raises if any are missing."""
        if sheet_name not in self._workbook.sheetnames:
            raise PersistenceError(f"Sheet '{sheet_name}' not found in {self.path}.")

        worksheet = self._workbook[sheet_name]
        headers: Dict[str, int] = {}
        for idx, cell in enumerate(worksheet[1], start=1):
            if cell.value is not None:
                headers[str(cell.value).strip()] = idx

        missing = [col for col in SHEETS[sheet_name] if col not in headers]
        if missing:
            raise PersistenceError(
                f"Missing required columns in sheet '{sheet_name}': {', '.join(missing)}"
            )
        return _Sheet(worksheet=worksheet, columns={col: headers[col] for col in SHEETS[sheet_name]})

    def _save(self) -> None:
        try:
            self._workbook.save(self.path)
        except OSError as exc:
            raise PersistenceError(f"Cannot save workbook {self.path}: {exc}") from exc

    # Invoices

    def last_invoice_number(self, account_id: str) -> Optional[str]:
        """Return the highest invoice number issued for the account."""
        sheet = self._sheets[INVOICES_SHEET]
        with self._lock:
            numbers = [
                str(sheet.value(row, "Invoice_Number"))
                for row in sheet.rows()
                if str(sheet.value(row, "Account_ID")) == account_id
            ]
        return highest_invoice_number(numbers)

    def append_invoice(self, snapshot: InvoiceSnapshot) -> str:
        """Store a new invoice and return its record id."""
        invoices = self._sheets[INVOICES_SHEET]
        items = self._sheets[ITEMS_SHEET]
        record_id = uuid.uuid4().hex

        with self._lock:
            for row in invoices.rows():
                if (
                    str(invoices.value(row, "Account_ID")) == snapshot.account_id
                    and str(invoices.value(row, "Invoice_Number")) == snapshot.invoice_number
                ):
                    raise DuplicateInvoiceNumberError(snapshot.invoice_number, snapshot.account_id)

            record = snapshot.to_record()
            invoice_row = invoices.append(
                {
                    "Record_ID": record_id,
                    "Invoice_Number": record["invoiceNumber"],
                    "Account_ID": record["userId"],
                    "Created_At": record["createdAt"],
                    "Status": record["status"],
                    "Subtotal": record["subtotal"],
                    "Item_Discounts": record["itemDiscounts"],
                    "Bill_Discount_Amount": record["billDiscountAmount"],
                    "Total_Discount": record["totalDiscount"],
                    "Total_Savings": record["totalSavings"],
                    "Total": record["total"],
                    "Discount_Type": record["billDiscount"]["type"],
                    "Discount_Value": record["billDiscount"]["value"],
                }
            )
            item_rows = []
            for position, item in enumerate(record["items"]):
                row_idx = items.append(
                    {
                        "Record_ID": record_id,
                        "Position": position,
                        "Name": item["name"],
                        "Quantity": item["quantity"],
                        "Rate": item["rate"],
                        "Discounted_Rate": item["discountedRate"],
                        "Amount": item["amount"],
                    }
                )
                item_rows.append(row_idx)


            try:
                self._save()
            except PersistenceError:
                # Keep the in-memory workbook in step with the file on disk.
                invoices.worksheet.delete_rows(invoice_row, 1)
                for row_idx in reversed(item_rows):
                    items.worksheet.delete_rows(row_idx, 1)
                raise

        logger.info(
            "Invoice stored",
            record_id=record_id,
            invoice_number=snapshot.invoice_number,
            account_id=snapshot.account_id,
        )
        return record_id

    def list_invoices(self, account_id: str) -> List[InvoiceSnapshot]:
        """Return the account's invoices in the order they were stored."""
        invoices = self._sheets[INVOICES_SHEET]
        items = self._sheets[ITEMS_SHEET]

        with self._lock:
            items_by_record: Dict[str, List[Dict]] = defaultdict(list)
            for row in items.rows():
                items_by_record[str(items.value(row, "Record_ID"))].append(
                    {
                        "position": to_float(items.value(row, "Position")),
                        "name": items.value(row, "Name"),
                        "quantity": items.value(row, "Quantity"),
                        "rate": items.value(row, "Rate"),
                        "discountedRate": items.value(row, "Discounted_Rate"),
                    }
                )

            result: List[InvoiceSnapshot] = []
            for row in invoices.rows():
                if str(invoices.value(row, "Account_ID")) != account_id:
                    continue
                record_id = str(invoices.value(row, "Record_ID"))
                record = {
                    "invoiceNumber": invoices.value(row, "Invoice_Number"),
                    "userId": account_id,
                    "items": sorted(items_by_record[record_id], key=lambda item: item["position"]),
                    "billDiscount": {
                        "type": invoices.value(row, "Discount_Type"),
                        "value": invoices.value(row, "Discount_Value"),
                    },
                    "subtotal": invoices.value(row, "Subtotal"),
                    "itemDiscounts": invoices.value(row, "Item_Discounts"),
                    "billDiscountAmount": invoices.value(row, "Bill_Discount_Amount"),
                    "totalDiscount": invoices.value(row, "Total_Discount"),
                    "totalSavings": invoices.value(row, "Total_Savings"),
                    "total": invoices.value(row, "Total"),
                    "createdAt": invoices.value(row, "Created_At"),
                    "status": invoices.value(row, "Status"),
                }
                result.append(InvoiceSnapshot.from_record(record, record_id=record_id))
        return result


    # Company profiles and printer settings

    def load_company(self, account_id: str) -> Optional[CompanyProfile]:
        sheet = self._sheets[COMPANIES_SHEET]
        with self._lock:
            row = self._find_account_row(sheet, account_id)
            if row is None:
                return None
            return CompanyProfile.from_record(
                {key: sheet.value(row, key) for key in CompanyProfile.record_keys()}
            )

    def save_company(self, account_id: str, profile: CompanyProfile) -> None:
        self._upsert(COMPANIES_SHEET, account_id, profile.to_record())
        logger.info("Company profile saved", account_id=account_id)

    def load_printer_settings(self, account_id: str) -> Optional[Dict]:
        """Return the stored settings document, or None when never saved."""
        sheet = self._sheets[SETTINGS_SHEET]
        with self._lock:
            row = self._find_account_row(sheet, account_id)
            if row is None:
                return None
            raw = sheet.value(row, "Document")
        try:
            return json.loads(raw) if raw else {}
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt printer settings for '{account_id}': {exc}") from exc

    def save_printer_settings(self, account_id: str, document: Dict) -> None:
        self._upsert(SETTINGS_SHEET, account_id, {"Document": json.dumps(document)})
        logger.info("Printer settings saved", account_id=account_id)

    def _find_account_row(self, sheet: _Sheet, account_id: str):
        for row in sheet.rows():
            if str(sheet.value(row, "Account_ID")) == account_id:
                return row
        return None

    def _upsert(self, sheet_name: str, account_id: str, record: Dict) -> None:
        sheet = self._sheets[sheet_name]
        with self._lock:
            row = self._find_account_row(sheet, account_id)
            if row is None:
                sheet.append({"Account_ID": account_id, **record})
            else:
                for column, value in record.items():
                    row[sheet.columns[column] - 1].value = value
            self._save()

