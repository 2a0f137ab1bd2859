"""Stock row helpers shared by sales, purchases and returns.

None of these commit. Callers add them to a larger unit of work and commit
(or roll back) once, so a sale and its stock movements land together.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationFailed
from ..models.product import InventoryStock, Product


def get_stock_row(db: Session, product_id: int) -> InventoryStock | None:
    stmt = select(InventoryStock).where(InventoryStock.product_id == product_id)
    return db.execute(stmt).scalars().first()


def ensure_stock_row(db: Session, product_id: int) -> InventoryStock:
    row = get_stock_row(db, product_id)
    if row is None:
        if db.get(Product, product_id) is None:
            raise NotFoundError(f"Product {product_id} not found")
        row = InventoryStock(product_id=product_id, quantity=0, updated_at=datetime.now())
        db.add(row)
        db.flush()
    return row


def available_quantity(db: Session, product_id: int) -> int:
    row = get_stock_row(db, product_id)
    return int(row.quantity) if row else 0


def increase_stock(db: Session, product_id: int, quantity: int) -> InventoryStock:
    if quantity <= 0:
        raise ValidationFailed("quantity must be greater than zero")
    row = ensure_stock_row(db, product_id)
    row.quantity = int(row.quantity or 0) + quantity
    row.updated_at = datetime.now()
    return row


def decrease_stock(db: Session, product_id: int, quantity: int) -> InventoryStock:
    if quantity <= 0:
        raise ValidationFailed("quantity must be greater than zero")
    row = ensure_stock_row(db, product_id)
    available = int(row.quantity or 0)
    if available < quantity:
        raise ValidationFailed(
            f"Insufficient stock for product {product_id}. Available: {available}, requested: {quantity}",
            details={"product_id": product_id, "available": available, "requested": quantity},
        )
    row.quantity = available - quantity
    row.updated_at = datetime.now()
    return row
