"""HTML invoice layouts for thermal and laser printers."""

from __future__ import annotations

from html import escape
from typing import List, Optional

from billing import config
from billing.models.company import CompanyProfile
from billing.models.invoice import InvoiceSnapshot, format_currency
from billing.settings import FieldVisibility, PrinterSettings, PrinterType

INVOICE_TITLE = "TAX INVOICE"


def _text(value) -> str:
    return escape(str(value))


def _amount(value: float) -> str:
    return escape(format_currency(value, config.CURRENCY_SYMBOL))


def _number(value: float) -> str:
    # Quantities and rates print without trailing zeros: 2.0 -> 2, 2.5 -> 2.5
    return f"{value:g}"


def _font(settings: PrinterSettings, base: float) -> str:
    return f"{base * settings.font_size.scale:g}px"


def _separator(visible: FieldVisibility) -> str:
    if visible.separator_lines:
        return "<hr style='border:none;border-top:1px dashed #000;' />"
    return "<br />"


def _company_lines(company: CompanyProfile, visible: FieldVisibility) -> List[str]:
    lines = []
    if visible.company_address and company.address:
        lines.append(_text(company.address))
    if visible.phone_number and company.phone:
        lines.append(f"Phone: {_text(company.phone)}")
    if visible.email and company.email:
        lines.append(f"Email: {_text(company.email)}")
    return lines


def _invoice_lines(invoice: InvoiceSnapshot, visible: FieldVisibility) -> List[str]:
    lines = []
    if visible.invoice_number:
        lines.append(f"Invoice No: {_text(invoice.invoice_number)}")
    if visible.invoice_date:
        lines.append(f"Date: {invoice.created_at.astimezone().strftime('%d/%m/%Y')}")
    return lines


def _items_table(invoice: InvoiceSnapshot, visible: FieldVisibility, amount_label: str) -> str:
    header = ["<th align='left'>Item</th>"]
    if visible.item_quantity:
        header.append("<th align='right'>Qty</th>")
    if visible.item_rate:
        header.append("<th align='right'>Rate</th>")
    if visible.item_amount:
        header.append(f"<th align='right'>{amount_label}</th>")

    rows = []
    for item in invoice.items:
        cells = [f"<td>{_text(item.name)}</td>"]
        if visible.item_quantity:
            cells.append(f"<td align='right'>{_number(item.quantity)}</td>")
        if visible.item_rate:
            cells.append(f"<td align='right'>{_number(item.rate)}</td>")
        if visible.item_amount:
            cells.append(f"<td align='right'>{item.amount:.2f}</td>")
        rows.append(f"<tr>{''.join(cells)}</tr>")

    return (
        "<table width='100%' cellspacing='0'>"
        f"<tr>{''.join(header)}</tr>{''.join(rows)}</table>"
    )


def _totals_table(invoice: InvoiceSnapshot, visible: FieldVisibility) -> str:
    rows = []
    if visible.subtotal:
        rows.append(f"<tr><td>Subtotal:</td><td align='right'>{_amount(invoice.subtotal)}</td></tr>")
    if visible.discount and invoice.total_discount > 0:
        rows.append(f"<tr><td>Discount:</td><td align='right'>{_amount(invoice.total_discount)}</td></tr>")
    if visible.saved_amount and invoice.total_savings > 0:
        rows.append(
            "<tr style='color:#16a34a;'><td>You Saved:</td>"
            f"<td align='right'>{_amount(invoice.total_savings)}</td></tr>"
        )
    if visible.total:
        rows.append(f"<tr><td><b>Total:</b></td><td align='right'><b>{_amount(invoice.total)}</b></td></tr>")
    return f"<table width='100%' class='totals'>{''.join(rows)}</table>"


def _footer_blocks(settings: PrinterSettings, centered_thanks: bool = True) -> List[str]:
    visible = settings.invoice_fields
    content = settings.custom_content
    blocks = []
    if visible.terms_and_conditions and content.terms_and_conditions:
        terms = _text(content.terms_and_conditions).replace("\n", "<br />")
        blocks.append(f"<div style='font-size:smaller;'>{terms}</div>")
    if visible.custom_notes and content.custom_notes:
        blocks.append(f"<div style='font-size:smaller;'><i>{_text(content.custom_notes)}</i></div>")
    if visible.thank_you_message and content.thank_you_message:
        align = "center" if centered_thanks else "left"
        blocks.append(f"<p align='{align}'>{_text(content.thank_you_message)}</p>")
    return blocks


def _thermal_body(invoice: InvoiceSnapshot, settings: PrinterSettings, company: CompanyProfile) -> str:
    visible = settings.invoice_fields
    parts = ["<div align='center'>"]
    if visible.company_name:
        name = company.name or config.STORE_HEADER
        parts.append(f"<div style='font-size:{_font(settings, 14)};'><b>{_text(name)}</b></div>")
    parts.extend(f"<div>{line}</div>" for line in _company_lines(company, visible))
    if visible.gst_number and company.gstin:
        parts.append(f"<div>GSTIN: {_text(company.gstin)}</div>")
    parts.append("</div>")

    parts.append(_separator(visible))
    parts.extend(f"<div>{line}</div>" for line in _invoice_lines(invoice, visible))
    parts.append(_separator(visible))
    parts.append(_items_table(invoice, visible, "Amt"))
    parts.append(_separator(visible))
    parts.append(_totals_table(invoice, visible))

    for block in _footer_blocks(settings):
        parts.append(_separator(visible))
        parts.append(block)
    return "".join(parts)


def _laser_body(invoice: InvoiceSnapshot, settings: PrinterSettings, company: CompanyProfile) -> str:
    visible = settings.invoice_fields
    company_cell = []
    if visible.company_name:
        name = company.name or config.STORE_HEADER
        company_cell.append(f"<div style='font-size:{_font(settings, 20)};'><b>{_text(name)}</b></div>")
    company_cell.extend(f"<div>{line}</div>" for line in _company_lines(company, visible))
    gst_cell = ""
    if visible.gst_number and company.gstin:
        gst_cell = f"<b>GSTIN</b><br />{_text(company.gstin)}"

    parts = [
        "<table width='100%'><tr>"
        f"<td valign='top'>{''.join(company_cell)}</td>"
        f"<td valign='top' align='right'>{gst_cell}</td>"
        "</tr></table>"
    ]
    if visible.invoice_title:
        parts.append(f"<h2 align='center' style='font-size:{_font(settings, 24)};'>{INVOICE_TITLE}</h2>")
    parts.extend(f"<div>{line}</div>" for line in _invoice_lines(invoice, visible))
    if visible.separator_lines:
        parts.append("<hr />")
    parts.append(_items_table(invoice, visible, "Amount"))
    if visible.separator_lines:
        parts.append("<hr />")
    parts.append(_totals_table(invoice, visible))
    parts.extend(_footer_blocks(settings))
    return "".join(parts)


def render_invoice_html(
    invoice: InvoiceSnapshot,
    settings: PrinterSettings,
    company: Optional[CompanyProfile] = None,
) -> str:
    """Render a stored invoice using the account's printer settings.

    Only fields switched on in ``settings.invoice_fields`` are printed. The
    discount and savings rows appear only when their amount is positive.
    """
    company = company or CompanyProfile()
    if settings.printer_type is PrinterType.THERMAL:
        body = _thermal_body(invoice, settings, company)
        base_font = 12
    else:
        body = _laser_body(invoice, settings, company)
        base_font = 14

    return f"""
        <html>
        <head>
            <style>
                body {{ font-family: 'Arial'; font-size: {_font(settings, base_font)}; }}
                table {{ width: 100%; border-collapse: collapse; }}
                td {{ padding: 2px 0; }}
                .totals td {{ padding-top: 4px; }}
            </style>
        </head>
        <body>{body}</body>
        </html>
        """
