"""Product catalog queries and writes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..models.category import Category
from ..models.product import InventoryStock, Product
from .stock import decrease_stock, get_stock_row, increase_stock

PRODUCT_FIELDS = (
    "code",
    "name",
    "description",
    "category_id",
    "brand",
    "model",
    "purchase_price",
    "sale_price",
    "min_stock",
    "warehouse_location",
    "image_url",
    "active",
)


class StockMovement(str, Enum):
    IN = "in"
    OUT = "out"


def _quantity_expr():
    return func.coalesce(InventoryStock.quantity, 0)


def list_products(db: Session, include_inactive: bool = False) -> list[Product]:
    stmt = select(Product)
    if not include_inactive:
        stmt = stmt.where(Product.active.is_(True))
    return db.execute(stmt.order_by(Product.name)).scalars().all()


def get_product(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def get_product_by_code(db: Session, code: str) -> Product | None:
    stmt = select(Product).where(func.upper(Product.code) == code.strip().upper())
    return db.execute(stmt).scalars().first()


def list_by_category(db: Session, category_id: int) -> list[Product]:
    stmt = (
        select(Product)
        .where(Product.category_id == category_id, Product.active.is_(True))
        .order_by(Product.name)
    )
    return db.execute(stmt).scalars().all()


def search_products(db: Session, term: str) -> list[Product]:
    """Case-insensitive match over code, name, description, model and category."""

    pattern = f"%{term.strip().lower()}%"
    stmt = (
        select(Product)
        .join(Category, Category.id == Product.category_id)
        .where(
            Product.active.is_(True),
            or_(
                func.lower(Product.code).like(pattern),
                func.lower(Product.name).like(pattern),
                func.lower(func.coalesce(Product.description, "")).like(pattern),
                func.lower(func.coalesce(Product.model, "")).like(pattern),
                func.lower(Category.name).like(pattern),
            ),
        )
        .order_by(Product.name)
    )
    return db.execute(stmt).scalars().all()


def list_low_stock(db: Session) -> list[Product]:
    """Active products below their minimum, largest shortfall first."""

    quantity = _quantity_expr()
    stmt = (
        select(Product)
        .outerjoin(InventoryStock, InventoryStock.product_id == Product.id)
        .where(Product.active.is_(True), quantity < Product.min_stock)
        .order_by(desc(Product.min_stock - quantity), Product.name)
    )
    return db.execute(stmt).scalars().all()


def count_products(db: Session) -> int:
    stmt = select(func.count(Product.id)).where(Product.active.is_(True))
    return int(db.execute(stmt).scalar() or 0)


def count_low_stock(db: Session) -> int:
    quantity = _quantity_expr()
    stmt = (
        select(func.count(Product.id))
        .outerjoin(InventoryStock, InventoryStock.product_id == Product.id)
        .where(Product.active.is_(True), quantity < Product.min_stock)
    )
    return int(db.execute(stmt).scalar() or 0)


def code_taken(db: Session, code: str, exclude_id: int | None = None) -> bool:
    stmt = select(func.count(Product.id)).where(func.upper(Product.code) == code.strip().upper())
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    return bool(db.execute(stmt).scalar())


def create_product(db: Session, data: dict) -> Product:
    """Insert a product together with its empty stock row."""

    if code_taken(db, data["code"]):
        raise ConflictError(f"A product with code '{data['code']}' already exists")
    product = Product(**{key: data[key] for key in PRODUCT_FIELDS if key in data})
    product.stock_row = InventoryStock(quantity=0, updated_at=datetime.now())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product: Product, data: dict) -> Product:
    if "code" in data and code_taken(db, data["code"], exclude_id=product.id):
        raise ConflictError(f"Another product already uses code '{data['code']}'")
    for key in PRODUCT_FIELDS:
        if key in data:
            setattr(product, key, data[key])
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product: Product) -> Product:
    product.active = False
    db.commit()
    db.refresh(product)
    return product


def get_stock(db: Session, product_id: int) -> int:
    row = get_stock_row(db, product_id)
    return int(row.quantity) if row else 0


def adjust_stock(db: Session, product_id: int, quantity: int, movement: StockMovement | str) -> int:
    """Apply a manual stock movement and return the resulting quantity."""

    movement = StockMovement(movement)
    try:
        if movement is StockMovement.IN:
            row = increase_stock(db, product_id, quantity)
        else:
            row = decrease_stock(db, product_id, quantity)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return int(row.quantity)

