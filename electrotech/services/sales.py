"""Sale validation, totals and lifecycle."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import ValidationFailed
from ..core.money import quantize_currency, to_decimal
from ..crud import sales as repo
from ..crud.clients import get_client
from ..crud.employees import get_employee
from ..crud.payment_methods import get_payment_method
from ..crud.products import get_product
from ..models.sale import Sale, SaleStatus
from . import fields

logger = logging.getLogger(__name__)


def line_subtotal(quantity: int, unit_price: Any, discount: Any = 0) -> Decimal:
    return quantize_currency(to_decimal(unit_price) * quantity - to_decimal(discount))


def compute_totals(lines: Iterable[dict], discount: Any = 0, tax_rate: Any = None) -> dict[str, Decimal]:
    """Subtotal, tax and total for a list of validated lines.

    Tax applies to the subtotal after the sale-wide discount.
    """

    rate = to_decimal(settings.TAX_RATE if tax_rate is None else tax_rate)
    subtotal = quantize_currency(sum((to_decimal(line["subtotal"]) for line in lines), Decimal("0")))
    discount = quantize_currency(discount)
    taxable = subtotal - discount
    tax = quantize_currency(taxable * rate)
    return {
        "subtotal": subtotal,
        "discount": discount,
        "tax": tax,
        "total": quantize_currency(taxable + tax),
    }


def _validate_lines(db: Session, raw_lines: list[dict] | None) -> list[dict]:
    if not raw_lines:
        raise ValidationFailed("A sale needs at least one line")
    lines: list[dict] = []
    for index, raw in enumerate(raw_lines, start=1):
        product_id = fields.positive_id(raw, "product_id", label=f"line {index} product")
        quantity = int(raw.get("quantity") or 0)
        if quantity <= 0:
            raise ValidationFailed(f"Line {index}: quantity must be greater than zero")
        price = raw.get("unit_price")
        if price is None:
            product = get_product(db, product_id)
            price = product.sale_price if product is not None else 0
        unit_price = quantize_currency(price)
        if unit_price <= 0:
            raise ValidationFailed(f"Line {index}: unit price must be greater than zero")
        line_discount = quantize_currency(raw.get("discount") or 0)
        if line_discount < 0 or line_discount > unit_price * quantity:
            raise ValidationFailed(f"Line {index}: discount must be between 0 and the line amount")
        lines.append(
            {
                "product_id": product_id,
                "quantity": quantity,
                "unit_price": unit_price,
                "discount": line_discount,
                "subtotal": line_subtotal(quantity, unit_price, line_discount),
            }
        )
    return lines


def validate_sale(db: Session, payload: dict) -> dict:
    """Check parties, lines and discount; return the header ready to persist."""

    client_id = fields.positive_id(payload, "client_id", label="client")
    employee_id = fields.positive_id(payload, "employee_id", label="employee")
    payment_method_id = fields.positive_id(payload, "payment_method_id", label="payment method")
    if get_client(db, client_id) is None:
        raise ValidationFailed(f"Client {client_id} does not exist")
    if get_employee(db, employee_id) is None:
        raise ValidationFailed(f"Employee {employee_id} does not exist")
    method = get_payment_method(db, payment_method_id)
    if method is None or not method.active:
        raise ValidationFailed(f"Payment method {payment_method_id} does not exist or is inactive")

    lines = _validate_lines(db, payload.get("lines"))
    discount = quantize_currency(payload.get("discount") or 0)
    totals = compute_totals(lines, discount)
    ceiling = quantize_currency(totals["subtotal"] * to_decimal(settings.MAX_SALE_DISCOUNT_RATE))
    if discount < 0 or discount > ceiling:
        raise ValidationFailed(
            f"Sale discount must be between 0 and {ceiling} ({settings.MAX_SALE_DISCOUNT_RATE:.0%} of the subtotal)",
            details={"discount": str(discount), "max_discount": str(ceiling)},
        )

    status = payload.get("status") or SaleStatus.COMPLETED.value
    if status not in (SaleStatus.PENDING.value, SaleStatus.COMPLETED.value):
        raise ValidationFailed("A sale can only be saved as pending or completed")

    data = {
        "client_id": client_id,
        "employee_id": employee_id,
        "payment_method_id": payment_method_id,
        "sold_at": fields.as_datetime(payload.get("sold_at"), "sold_at", default=datetime.now()),
        "notes": fields.text(payload, "notes"),
        "status": status,
        "lines": lines,
        **totals,
    }
    data["commission"] = quantize_currency(totals["total"] * to_decimal(settings.COMMISSION_RATE))
    invoice_number = fields.text(payload, "invoice_number", max_length=20)
    if invoice_number:
        data["invoice_number"] = invoice_number
    return data


def create_sale(db: Session, payload: dict) -> Sale:
    data = validate_sale(db, payload)
    data.setdefault("invoice_number", repo.next_invoice_number(db, data["sold_at"].date()))
    try:
        sale = repo.create_sale(db, data)
    except ValidationFailed as exc:
        logger.warning("Sale rejected: %s", exc.message)
        raise
    logger.info(
        "Sale %s created: total=%s lines=%s status=%s",
        sale.invoice_number,
        sale.total,
        len(sale.lines),
        sale.status,
    )
    return sale


def update_sale(db: Session, sale: Sale, payload: dict) -> Sale:
    repo.require_status(sale, SaleStatus.PENDING, "edited")
    merged = {
        "client_id": sale.client_id,
        "employee_id": sale.employee_id,
        "payment_method_id": sale.payment_method_id,
        "discount": sale.discount,
        "notes": sale.notes,
        "sold_at": sale.sold_at,
        "status": sale.status,
        "lines": [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "discount": line.discount,
            }
            for line in sale.lines
        ],
    }
    merged.update({key: value for key, value in payload.items() if value is not None})
    data = validate_sale(db, merged)
    sale = repo.update_sale(db, sale, data)
    logger.info("Sale %s updated: total=%s", sale.invoice_number, sale.total)
    return sale


def complete_sale(db: Session, sale: Sale) -> Sale:
    sale = repo.complete_sale(db, sale)
    logger.info("Sale %s completed", sale.invoice_number)
    return sale


def void_sale(db: Session, sale: Sale) -> Sale:
    sale = repo.void_sale(db, sale)
    logger.info("Sale %s voided; stock restored", sale.invoice_number)
    return sale


def monthly_sales_total(db: Session, today: date | None = None) -> Decimal:
    today = today or date.today()
    first = today.replace(day=1)
    following = date(first.year + (first.month == 12), first.month % 12 + 1, 1)
    return repo.sales_total(db, first, following - timedelta(days=1))
