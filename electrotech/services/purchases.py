"""Purchase order validation and lifecycle."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from ..core.errors import ValidationFailed
from ..core.money import amounts_match, quantize_currency, to_decimal
from ..crud import purchases as repo
from ..crud.products import get_product
from ..crud.suppliers import get_supplier
from ..models.purchase import Purchase, PurchaseStatus
from . import fields

logger = logging.getLogger(__name__)


def _validate_lines(db: Session, raw_lines: list[dict] | None) -> list[dict]:
    if not raw_lines:
        raise ValidationFailed("A purchase needs at least one line")
    lines: list[dict] = []
    for index, raw in enumerate(raw_lines, start=1):
        product_id = fields.positive_id(raw, "product_id", label=f"line {index} product")
        if get_product(db, product_id) is None:
            raise ValidationFailed(f"Line {index}: product {product_id} does not exist")
        quantity = int(raw.get("quantity") or 0)
        if quantity <= 0:
            raise ValidationFailed(f"Line {index}: quantity must be greater than zero")
        unit_price = quantize_currency(raw.get("unit_price"))
        if unit_price <= 0:
            raise ValidationFailed(f"Line {index}: unit price must be greater than zero")
        expected = quantize_currency(unit_price * quantity)
        if raw.get("subtotal") is not None and not amounts_match(raw["subtotal"], expected):
            raise ValidationFailed(
                f"Line {index}: subtotal {raw['subtotal']} does not match quantity x price ({expected})"
            )
        lines.append(
            {"product_id": product_id, "quantity": quantity, "unit_price": unit_price, "subtotal": expected}
        )
    return lines


def validate_purchase(db: Session, payload: dict) -> dict:
    """Check a purchase order and reconcile any client-supplied totals."""

    order_number = fields.text(payload, "order_number", required=True, max_length=20, label="order number")
    ordered_at = fields.as_datetime(payload.get("ordered_at"), "ordered_at")
    supplier_id = fields.positive_id(payload, "supplier_id", label="supplier")
    supplier = get_supplier(db, supplier_id)
    if supplier is None or not supplier.active:
        raise ValidationFailed(f"Supplier {supplier_id} does not exist or is inactive")
    status = payload.get("status") or PurchaseStatus.PENDING.value
    try:
        status = PurchaseStatus(status).value
    except ValueError as exc:
        raise ValidationFailed(f"Unknown purchase status '{status}'") from exc

    lines = _validate_lines(db, payload.get("lines"))
    subtotal = quantize_currency(sum((line["subtotal"] for line in lines), Decimal("0")))
    if payload.get("subtotal") is not None and not amounts_match(payload["subtotal"], subtotal):
        raise ValidationFailed(f"Subtotal {payload['subtotal']} does not match the sum of the lines ({subtotal})")
    tax = fields.money(payload, "tax", default=0)
    total = quantize_currency(subtotal + tax)
    if payload.get("total") is not None and not amounts_match(payload["total"], to_decimal(total)):
        raise ValidationFailed(f"Total {payload['total']} does not equal subtotal + tax ({total})")

    return {
        "order_number": order_number,
        "ordered_at": ordered_at,
        "supplier_id": supplier_id,
        "status": status,
        "notes": fields.text(payload, "notes"),
        "subtotal": subtotal,
        "tax": tax,
        "total": total,
        "lines": lines,
    }


def next_order_number(db: Session) -> str:
    return repo.next_order_number(db)


def create_purchase(db: Session, payload: dict) -> Purchase:
    data = dict(payload)
    if not data.get("order_number"):
        data["order_number"] = repo.next_order_number(db)
    if not data.get("ordered_at"):
        data["ordered_at"] = datetime.now()
    purchase = repo.create_purchase(db, validate_purchase(db, data))
    logger.info(
        "Purchase %s created for supplier %s: total=%s status=%s",
        purchase.order_number,
        purchase.supplier_id,
        purchase.total,
        purchase.status,
    )
    return purchase


def update_purchase(db: Session, purchase: Purchase, payload: dict) -> Purchase:
    repo.require_pending(purchase, "edited")
    merged = {
        "order_number": purchase.order_number,
        "ordered_at": purchase.ordered_at,
        "supplier_id": purchase.supplier_id,
        "status": purchase.status,
        "notes": purchase.notes,
        "tax": purchase.tax,
        "lines": [
            {"product_id": line.product_id, "quantity": line.quantity, "unit_price": line.unit_price}
            for line in purchase.lines
        ],
    }
    merged.update({key: value for key, value in payload.items() if value is not None})
    purchase = repo.update_purchase(db, purchase, validate_purchase(db, merged))
    logger.info("Purchase %s updated: status=%s", purchase.order_number, purchase.status)
    return purchase


def receive_purchase(db: Session, purchase: Purchase) -> Purchase:
    purchase = repo.receive_purchase(db, purchase)
    logger.info("Purchase %s received; %s line(s) stocked", purchase.order_number, len(purchase.lines))
    return purchase


def cancel_purchase(db: Session, purchase: Purchase) -> Purchase:
    purchase = repo.cancel_purchase(db, purchase)
    logger.info("Purchase %s cancelled", purchase.order_number)
    return purchase
