"""Printable sale invoices and return credit notes."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ..core.money import format_currency, quantize_currency
from ..models.sale import Sale
from ..models.sales_return import SalesReturn

LOGGER = logging.getLogger(__name__)

INVOICE_WIDTH = 53
CREDIT_NOTE_WIDTH = 65
PDF_FONT_FAMILY = "DejaVu"
PDF_FONT_FILES = {
    "": "DejaVuSans.ttf",
    "B": "DejaVuSans-Bold.ttf",
}
FONT_DIR = Path(__file__).resolve().parent.parent / "static" / "fonts"
DEFAULT_CLIENT = "Cliente General"
NAME_LIMIT = 24


def _short_name(name: Optional[str], product_id: int) -> str:
    label = name or f"Producto {product_id}"
    if len(label) > NAME_LIMIT:
        return label[:21] + "..."
    return label


def _client_lines(sale: Sale, fallback: str) -> Tuple[str, str]:
    client = sale.client
    if client is None:
        return fallback, ""
    return client.full_name, f"{client.document_type} {client.document_number}"


def _register_pdf_fonts(pdf: FPDF) -> None:
    for style, filename in PDF_FONT_FILES.items():
        if f"{PDF_FONT_FAMILY.lower()}{style}" in pdf.fonts:
            continue
        font_file = FONT_DIR / filename
        if not font_file.exists():
            LOGGER.error("Invoice font missing: %s", font_file)
            raise FileNotFoundError(font_file)
        pdf.add_font(PDF_FONT_FAMILY, style=style, fname=str(font_file))


def _total_row(label: str, amount) -> str:
    return f"{label:<40}{format_currency(amount)}"


def _invoice_rows(sale: Sale) -> List[str]:
    rows = []
    for line in sale.lines:
        rows.append(
            "{:<24} {:>5} {:>10} {:>10}".format(
                _short_name(line.product_name, line.product_id),
                line.quantity,
                format_currency(line.unit_price),
                format_currency(line.subtotal),
            )
        )
    return rows


def render_invoice_text(sale: Sale) -> str:
    client_name, client_document = _client_lines(sale, DEFAULT_CLIENT)
    rule = "-" * INVOICE_WIDTH
    banner = "=" * INVOICE_WIDTH
    parts = [
        banner,
        "ELECTROTECH".center(INVOICE_WIDTH).rstrip(),
        "FACTURA DE VENTA".center(INVOICE_WIDTH).rstrip(),
        banner,
        "",
        f"Número de Factura: {sale.invoice_number}",
        f"Fecha: {sale.sold_at:%d/%m/%Y %H:%M}",
        "",
        f"Cliente: {client_name}",
        f"Documento: {client_document}".rstrip(),
        f"Vendedor: {sale.employee_name or ''}".rstrip(),
        f"Método de Pago: {sale.payment_method_name or ''}".rstrip(),
        "",
        rule,
        "{:<24} {:>5} {:>10} {:>10}".format("Producto", "Cant", "Precio", "Subtotal"),
        rule,
        *_invoice_rows(sale),
        rule,
        _total_row("Subtotal:", sale.subtotal),
        _total_row("Descuento:", sale.discount),
        _total_row("Impuestos:", sale.tax),
        _total_row("TOTAL:", sale.total),
        banner,
        "",
        "Gracias por su compra!".center(INVOICE_WIDTH).rstrip(),
        f"ElectroTech © {sale.sold_at:%Y}".center(INVOICE_WIDTH).rstrip(),
    ]
    return "\n".join(parts) + "\n"


def render_invoice_pdf(sale: Sale) -> bytes:
    """Render the invoice as an A4 PDF in DejaVu Sans so any Unicode product or client name prints."""

    client_name, client_document = _client_lines(sale, DEFAULT_CLIENT)

    pdf = FPDF(unit="mm", format="A4")
    _register_pdf_fonts(pdf)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    effective_width = pdf.w - pdf.l_margin - pdf.r_margin

    pdf.set_font(PDF_FONT_FAMILY, "B", 16)
    pdf.cell(effective_width, 9, "ELECTROTECH", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font(PDF_FONT_FAMILY, "B", 12)
    pdf.cell(effective_width, 7, "FACTURA DE VENTA", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    pdf.set_font(PDF_FONT_FAMILY, "", 10)
    for label in (
        f"Número de Factura: {sale.invoice_number}",
        f"Fecha: {sale.sold_at:%d/%m/%Y %H:%M}",
        f"Cliente: {client_name}",
        f"Documento: {client_document}",
        f"Vendedor: {sale.employee_name or ''}",
        f"Método de Pago: {sale.payment_method_name or ''}",
    ):
        pdf.cell(effective_width, 5.5, label, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    widths = (effective_width * 0.52, effective_width * 0.12, effective_width * 0.18, effective_width * 0.18)
    pdf.set_font(PDF_FONT_FAMILY, "B", 10)
    for width, heading, align in zip(widths, ("Producto", "Cant", "Precio", "Subtotal"), "LRRR"):
        pdf.cell(width, 7, heading, border="B", align=align)
    pdf.ln(7)

    pdf.set_font(PDF_FONT_FAMILY, "", 10)
    for line in sale.lines:
        values = (
            line.product_name or f"Producto {line.product_id}",
            str(line.quantity),
            format_currency(line.unit_price),
            format_currency(line.subtotal),
        )
        for width, value, align in zip(widths, values, "LRRR"):
            pdf.cell(width, 6, value, align=align)
        pdf.ln(6)
    pdf.ln(3)

    label_width = widths[0] + widths[1] + widths[2]
    for label, amount, style in (
        ("Subtotal", sale.subtotal, ""),
        ("Descuento", sale.discount, ""),
        ("Impuestos", sale.tax, ""),
        ("TOTAL", sale.total, "B"),
    ):
        pdf.set_font(PDF_FONT_FAMILY, style, 10)
        pdf.cell(label_width, 6, label, align="R")
        pdf.cell(widths[3], 6, format_currency(amount), align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(8)
    pdf.set_font(PDF_FONT_FAMILY, "", 10)
    pdf.cell(effective_width, 5, "Gracias por su compra!", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    LOGGER.debug("Rendered invoice PDF for %s", sale.invoice_number)
    output = pdf.output()
    if isinstance(output, str):
        return output.encode("latin1")
    return bytes(output)


def render_credit_note_text(sales_return: SalesReturn, issued_at: Optional[datetime] = None) -> str:
    sale = sales_return.sale
    issued_at = issued_at or datetime.now()
    client_name, client_document = _client_lines(sale, "Cliente no disponible")
    banner = "=" * CREDIT_NOTE_WIDTH
    rule = "-" * (CREDIT_NOTE_WIDTH + 1)

    parts = [
        banner,
        "NOTA DE CRÉDITO".center(CREDIT_NOTE_WIDTH).rstrip(),
        banner,
        "",
        f"Número: {sales_return.credit_note_number}",
        f"Fecha: {issued_at:%d/%m/%Y %H:%M:%S}",
        f"Venta relacionada: {sale.invoice_number}",
        "",
        "DATOS DEL CLIENTE:",
        f"Nombre: {client_name}",
        f"Documento: {client_document}".rstrip(),
        "",
        "DATOS DE LA DEVOLUCIÓN:",
        f"Fecha de devolución: {sales_return.returned_on:%d/%m/%Y}",
        f"Motivo: {sales_return.reason}",
        "",
        "PRODUCTOS DEVUELTOS:",
        rule,
        "Código   Descripción                Cant.   Precio      Subtotal",
        rule,
    ]
    for line in sale.lines:
        parts.append(
            f"{(line.product_code or ''):<9}"
            f"{(line.product_name or '')[:28]:<28}"
            f"{line.quantity:>5}   "
            f"{quantize_currency(line.unit_price):>10}   "
            f"{quantize_currency(line.subtotal):>10}"
        )
    parts.extend(
        [
            rule,
            f"{'IMPORTE TOTAL:':>54} {quantize_currency(sales_return.amount):>10}",
            "",
            banner,
            "Esta nota de crédito sirve como comprobante".center(CREDIT_NOTE_WIDTH).rstrip(),
            "de la devolución de los productos indicados".center(CREDIT_NOTE_WIDTH).rstrip(),
            banner,
        ]
    )
    return "\n".join(parts) + "\n"
