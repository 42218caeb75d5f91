"""Invoice printing via QTextDocument to a Windows printer."""

from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import QSizeF
from PyQt5.QtGui import QTextDocument
from PyQt5.QtPrintSupport import QPrinter

from billing import config
from billing.models.company import CompanyProfile
from billing.models.invoice import InvoiceSnapshot
from billing.printing.templates import render_invoice_html
from billing.settings import PrinterSettings, PrinterType
from billing.utils.logging import get_logger

logger = get_logger(__name__)

# Page height for thermal rolls: 60mm base plus 8mm per line item.
THERMAL_BASE_MM = 60.0
THERMAL_LINE_MM = 8.0
LASER_HEIGHT_MM = {"A4": 297.0, "A5": 210.0}


class ReceiptPrinter:
    """Render and print invoices as HTML to a target printer."""

    def __init__(self, printer_name: str | None = None) -> None:
        self.printer_name = printer_name or config.PRINTER_NAME

    @staticmethod
    def page_size_mm(invoice: InvoiceSnapshot, settings: PrinterSettings) -> QSizeF:
        width = settings.paper_width_mm
        if settings.printer_type is PrinterType.THERMAL:
            # Dynamic height to avoid truncation on continuous rolls.
            height = THERMAL_BASE_MM + len(invoice.items) * THERMAL_LINE_MM
        else:
            height = LASER_HEIGHT_MM[settings.paper_size]
        return QSizeF(width, height)

    def print_invoice(
        self,
        invoice: InvoiceSnapshot,
        settings: PrinterSettings,
        company: Optional[CompanyProfile] = None,
    ) -> bool:
        """Send the invoice to the printer; returns True on success."""
        printer = QPrinter(QPrinter.HighResolution)
        printer.setPrinterName(self.printer_name)

        if not printer.isValid():
            logger.warning("Printer not available", printer=self.printer_name)
            return False

        page_size = self.page_size_mm(invoice, settings)
        printer.setPaperSize(page_size, QPrinter.Millimeter)
        printer.setFullPage(settings.printer_type is PrinterType.THERMAL)

        doc = QTextDocument()
        doc.setHtml(render_invoice_html(invoice, settings, company))
        doc.setPageSize(page_size)

        doc.print_(printer)
        logger.info(
            "Invoice sent to printer",
            printer=self.printer_name,
            invoice_number=invoice.invoice_number,
            paper_size=settings.paper_size,
        )
        return printer.isValid()
