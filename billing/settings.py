"""Printer and invoice-template preferences.

Settings are loaded per call by merging stored documents over the defaults.
Later documents win per leaf key, unknown keys are ignored and anything
missing falls back to the defaults below.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from billing.errors import ValidationError
from billing.utils.logging import get_logger

logger = get_logger(__name__)


class PrinterType(str, Enum):
    THERMAL = "thermal"
    LASER = "laser"


class FontSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def scale(self) -> float:
        return {FontSize.SMALL: 0.875, FontSize.MEDIUM: 1.0, FontSize.LARGE: 1.125}[self]


# Paper sizes per printer type; the first entry is the default. Widths in mm.
PAPER_SIZES: Dict[PrinterType, Tuple[str, ...]] = {
    PrinterType.THERMAL: ("3inch", "4inch"),
    PrinterType.LASER: ("A4", "A5"),
}
PAPER_WIDTH_MM: Dict[str, float] = {
    "3inch": 76.2,
    "4inch": 101.6,
    "A4": 210.0,
    "A5": 148.0,
}


class InvoiceField(Enum):
    """Optional invoice fields: (stored key, attribute name, label)."""

    COMPANY_NAME = ("companyName", "company_name", "Company Name")
    COMPANY_ADDRESS = ("companyAddress", "company_address", "Company Address")
    PHONE_NUMBER = ("phoneNumber", "phone_number", "Phone Number")
    EMAIL = ("email", "email", "Email")
    GST_NUMBER = ("gstNumber", "gst_number", "GST Number")
    INVOICE_TITLE = ("invoiceTitle", "invoice_title", "Invoice Title")
    INVOICE_NUMBER = ("invoiceNumber", "invoice_number", "Invoice Number")
    INVOICE_DATE = ("invoiceDate", "invoice_date", "Invoice Date")
    CLIENT_NAME = ("clientName", "client_name", "Client Name")
    ITEM_QUANTITY = ("itemQuantity", "item_quantity", "Item Quantity")
    ITEM_RATE = ("itemRate", "item_rate", "Item Rate")
    ITEM_AMOUNT = ("itemAmount", "item_amount", "Item Amount")
    SUBTOTAL = ("subtotal", "subtotal", "Subtotal")
    DISCOUNT = ("discount", "discount", "Discount")
    SAVED_AMOUNT = ("savedAmount", "saved_amount", "Saved Amount")
    TOTAL = ("total", "total", "Total")
    SEPARATOR_LINES = ("separatorLines", "separator_lines", "Separator Lines")
    BARCODE_QR = ("barcodeQR", "barcode_qr", "Barcode/QR Code")
    PAYMENT_MODE = ("paymentMode", "payment_mode", "Payment Mode")
    TERMS_AND_CONDITIONS = ("termsAndConditions", "terms_and_conditions", "Terms and Conditions")
    CUSTOM_NOTES = ("customNotes", "custom_notes", "Custom Notes")
    THANK_YOU_MESSAGE = ("thankYouMessage", "thank_you_message", "Thank You Message")

    def __init__(self, key: str, attr: str, label: str) -> None:
        self.key = key
        self.attr = attr
        self.label = label

    @classmethod
    def from_key(cls, key: str) -> Optional["InvoiceField"]:
        for member in cls:
            if member.key == key:
                return member
        return None


@dataclass(frozen=True)
class FieldVisibility:
    company_name: bool = True
    company_address: bool = True
    phone_number: bool = True
    email: bool = True
    gst_number: bool = True
    invoice_title: bool = True
    invoice_number: bool = True
    invoice_date: bool = True
    client_name: bool = True
    item_quantity: bool = True
    item_rate: bool = True
    item_amount: bool = True
    subtotal: bool = True
    discount: bool = True
    saved_amount: bool = True
    total: bool = True
    separator_lines: bool = True
    barcode_qr: bool = True
    payment_mode: bool = True
    terms_and_conditions: bool = True
    custom_notes: bool = True
    thank_you_message: bool = True

    def is_visible(self, invoice_field: InvoiceField) -> bool:
        match invoice_field:
            case InvoiceField.COMPANY_NAME:
                return self.company_name
            case InvoiceField.COMPANY_ADDRESS:
                return self.company_address
            case InvoiceField.PHONE_NUMBER:
                return self.phone_number
            case InvoiceField.EMAIL:
                return self.email
            case InvoiceField.GST_NUMBER:
                return self.gst_number
            case InvoiceField.INVOICE_TITLE:
                return self.invoice_title
            case InvoiceField.INVOICE_NUMBER:
                return self.invoice_number
            case InvoiceField.INVOICE_DATE:
                return self.invoice_date
            case InvoiceField.CLIENT_NAME:
                return self.client_name
            case InvoiceField.ITEM_QUANTITY:
                return self.item_quantity
            case InvoiceField.ITEM_RATE:
                return self.item_rate
            case InvoiceField.ITEM_AMOUNT:
                return self.item_amount
            case InvoiceField.SUBTOTAL:
                return self.subtotal
            case InvoiceField.DISCOUNT:
                return self.discount
            case InvoiceField.SAVED_AMOUNT:
                return self.saved_amount
            case InvoiceField.TOTAL:
                return self.total
            case InvoiceField.SEPARATOR_LINES:
                return self.separator_lines
            case InvoiceField.BARCODE_QR:
                return self.barcode_qr
            case InvoiceField.PAYMENT_MODE:
                return self.payment_mode
            case InvoiceField.TERMS_AND_CONDITIONS:
                return self.terms_and_conditions
            case InvoiceField.CUSTOM_NOTES:
                return self.custom_notes
            case InvoiceField.THANK_YOU_MESSAGE:
                return self.thank_you_message
        raise ValueError(f"Unknown invoice field: {invoice_field!r}")

    def with_field(self, invoice_field: InvoiceField, visible: bool) -> "FieldVisibility":
        return replace(self, **{invoice_field.attr: bool(visible)})

    def merged(self, document: Mapping) -> "FieldVisibility":
        changes = {}
        for key, visible in document.items():
            invoice_field = InvoiceField.from_key(key)
            if invoice_field is not None:
                changes[invoice_field.attr] = bool(visible)
        return replace(self, **changes)

    def to_document(self) -> Dict[str, bool]:
        return {member.key: self.is_visible(member) for member in InvoiceField}


DEFAULT_THANK_YOU = "Thank you for your business!"
DEFAULT_TERMS = (
    "1. All sales are final\n"
    "2. Returns accepted within 7 days\n"
    "3. Please keep your bill for warranty"
)

_CONTENT_KEYS = {
    "thank_you_message": "thankYouMessage",
    "terms_and_conditions": "termsAndConditions",
    "custom_notes": "customNotes",
}


@dataclass(frozen=True)
class CustomContent:
    thank_you_message: str = DEFAULT_THANK_YOU
    terms_and_conditions: str = DEFAULT_TERMS
    custom_notes: str = ""

    def merged(self, document: Mapping) -> "CustomContent":
        changes = {
            attr: str(document[key])
            for attr, key in _CONTENT_KEYS.items()
            if document.get(key) is not None
        }
        return replace(self, **changes)

    def to_document(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for attr, key in _CONTENT_KEYS.items()}


@dataclass(frozen=True)
class PrinterSettings:
    printer_type: PrinterType = PrinterType.THERMAL
    paper_size: str = "3inch"
    font_size: FontSize = FontSize.MEDIUM
    invoice_fields: FieldVisibility = field(default_factory=FieldVisibility)
    custom_content: CustomContent = field(default_factory=CustomContent)

    def __post_init__(self) -> None:
        object.__setattr__(self, "printer_type", _enum_value(PrinterType, self.printer_type, "printerType"))
        object.__setattr__(self, "font_size", _enum_value(FontSize, self.font_size, "fontSize"))
        if self.paper_size not in PAPER_SIZES[self.printer_type]:
            raise ValidationError(
                f"Paper size '{self.paper_size}' is not available for "
                f"{self.printer_type.value} printers.",
                field="paperSize",
            )

    @classmethod
    def load(cls, *documents: Optional[Mapping]) -> "PrinterSettings":
        """Merge stored documents over the defaults, later ones winning."""
        printer_type = PrinterType.THERMAL
        paper_size: Optional[str] = None
        font_size = FontSize.MEDIUM
        visibility = FieldVisibility()
        content = CustomContent()

        for document in documents:
            if not document:
                continue
            if "printerType" in document:
                printer_type = _enum_value(PrinterType, document["printerType"], "printerType")
            if "paperSize" in document:
                paper_size = str(document["paperSize"])
            if "fontSize" in document:
                font_size = _enum_value(FontSize, document["fontSize"], "fontSize")
            visibility = visibility.merged(document.get("invoiceFields") or {})
            content = content.merged(document.get("customContent") or {})

        if paper_size not in PAPER_SIZES[printer_type]:
            if paper_size is not None:
                logger.warning(
                    "Stored paper size does not fit printer type",
                    paper_size=paper_size,
                    printer_type=printer_type.value,
                )
            paper_size = PAPER_SIZES[printer_type][0]

        return cls(
            printer_type=printer_type,
            paper_size=paper_size,
            font_size=font_size,
            invoice_fields=visibility,
            custom_content=content,
        )

    def with_printer_type(self, printer_type: PrinterType) -> "PrinterSettings":
        """Switch printer type and reset the paper size to its default."""
        return replace(
            self, printer_type=printer_type, paper_size=PAPER_SIZES[printer_type][0]
        )

    @property
    def paper_width_mm(self) -> float:
        return PAPER_WIDTH_MM[self.paper_size]

    def to_document(self) -> Dict:
        return {
            "printerType": self.printer_type.value,
            "paperSize": self.paper_size,
            "fontSize": self.font_size.value,
            "invoiceFields": self.invoice_fields.to_document(),
            "customContent": self.custom_content.to_document(),
        }


def _enum_value(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}", field=field_name) from None
