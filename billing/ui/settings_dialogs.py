"""Dialogs for company details and printer preferences."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Dict, Optional

from PyQt5.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QPlainTextEdit,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from billing.models.company import CompanyProfile
from billing.settings import (
    PAPER_SIZES,
    CustomContent,
    FontSize,
    InvoiceField,
    PrinterSettings,
    PrinterType,
)

# Labels for the company form, in display order.
COMPANY_LABELS = {
    "name": "Company Name",
    "address": "Address",
    "email": "Email",
    "phone": "Phone",
    "website": "Website",
    "gstin": "GSTIN",
    "pan": "PAN",
    "bank_name": "Bank Name",
    "account_number": "Account Number",
    "ifsc_code": "IFSC Code",
    "upi_id": "UPI ID",
    "additional_info": "Additional Info",
}


def _buttons(dialog: QDialog) -> QDialogButtonBox:
    box = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
    box.accepted.connect(dialog.accept)
    box.rejected.connect(dialog.reject)
    return box


class CompanyDialog(QDialog):
    """Edit company and bank details."""

    def __init__(self, profile: Optional[CompanyProfile], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Company Settings")
        profile = profile or CompanyProfile()

        self._inputs: Dict[str, QLineEdit] = {}
        form = QFormLayout()
        for name, label in COMPANY_LABELS.items():
            edit = QLineEdit(getattr(profile, name))
            self._inputs[name] = edit
            form.addRow(label, edit)

        layout = QVBoxLayout()
        layout.addLayout(form)
        layout.addWidget(_buttons(self))
        self.setLayout(layout)

    def profile(self) -> CompanyProfile:
        return CompanyProfile(
            **{f.name: self._inputs[f.name].text().strip() for f in fields(CompanyProfile)}
        )


class PrinterSettingsDialog(QDialog):
    """Edit printer type, paper, font size, visible fields and custom texts."""

    def __init__(self, settings: PrinterSettings, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Printer Settings")
        self._settings = settings

        layout = QVBoxLayout()
        layout.addWidget(self._build_basic_group())
        layout.addWidget(self._build_fields_group())
        layout.addWidget(self._build_content_group())
        layout.addWidget(_buttons(self))
        self.setLayout(layout)

    def _build_basic_group(self) -> QGroupBox:
        group = QGroupBox("Basic Settings")
        form = QFormLayout()

        type_row = QHBoxLayout()
        self._type_group = QButtonGroup(self)
        self._type_buttons: Dict[PrinterType, QRadioButton] = {}
        for printer_type, label in ((PrinterType.THERMAL, "Thermal Printer"), (PrinterType.LASER, "Laser Printer")):
            button = QRadioButton(label)
            button.setChecked(printer_type is self._settings.printer_type)
            self._type_group.addButton(button)
            self._type_buttons[printer_type] = button
            type_row.addWidget(button)

        self.paper_combo = QComboBox()
        self._fill_paper_sizes(self._settings.printer_type, self._settings.paper_size)
        for button in self._type_buttons.values():
            button.toggled.connect(self._on_type_toggled)

        self.font_combo = QComboBox()
        for font_size in FontSize:
            self.font_combo.addItem(font_size.value.capitalize(), font_size)
        self.font_combo.setCurrentIndex(list(FontSize).index(self._settings.font_size))

        form.addRow("Printer Type", type_row)
        form.addRow("Paper Size", self.paper_combo)
        form.addRow("Font Size", self.font_combo)
        group.setLayout(form)
        return group

    def _build_fields_group(self) -> QGroupBox:
        group = QGroupBox("Invoice Fields")
        grid = QGridLayout()
        self._field_boxes: Dict[InvoiceField, QCheckBox] = {}
        for index, invoice_field in enumerate(InvoiceField):
            box = QCheckBox(invoice_field.label)
            box.setChecked(self._settings.invoice_fields.is_visible(invoice_field))
            self._field_boxes[invoice_field] = box
            grid.addWidget(box, index // 2, index % 2)
        group.setLayout(grid)
        return group

    def _build_content_group(self) -> QGroupBox:
        group = QGroupBox("Custom Content")
        form = QFormLayout()
        content = self._settings.custom_content
        self.thank_you_edit = QLineEdit(content.thank_you_message)
        self.terms_edit = QPlainTextEdit(content.terms_and_conditions)
        self.notes_edit = QPlainTextEdit(content.custom_notes)
        form.addRow("Thank You Message", self.thank_you_edit)
        form.addRow("Terms and Conditions", self.terms_edit)
        form.addRow("Custom Notes", self.notes_edit)
        group.setLayout(form)
        return group

    def _fill_paper_sizes(self, printer_type: PrinterType, selected: str) -> None:
        self.paper_combo.clear()
        for size in PAPER_SIZES[printer_type]:
            self.paper_combo.addItem(size.replace("inch", " inch"), size)
        self.paper_combo.setCurrentIndex(max(self.paper_combo.findData(selected), 0))

    def _selected_type(self) -> PrinterType:
        for printer_type, button in self._type_buttons.items():
            if button.isChecked():
                return printer_type
        return self._settings.printer_type

    def _on_type_toggled(self, checked: bool) -> None:
        if not checked:
            return
        switched = self._settings.with_printer_type(self._selected_type())
        self._fill_paper_sizes(switched.printer_type, switched.paper_size)

    def settings(self) -> PrinterSettings:
        visibility = self._settings.invoice_fields
        for invoice_field, box in self._field_boxes.items():
            visibility = visibility.with_field(invoice_field, box.isChecked())

        return replace(
            self._settings,
            printer_type=self._selected_type(),
            paper_size=str(self.paper_combo.currentData()),
            font_size=FontSize(self.font_combo.currentData()),
            invoice_fields=visibility,
            custom_content=CustomContent(
                thank_you_message=self.thank_you_edit.text(),
                terms_and_conditions=self.terms_edit.toPlainText(),
                custom_notes=self.notes_edit.toPlainText(),
            ),
        )
