"""Product validation and stock adjustments."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationFailed
from ..crud import products as repo
from ..crud.categories import get_category
from ..crud.products import StockMovement
from ..models.product import Product
from . import fields

logger = logging.getLogger(__name__)


def validate_product(db: Session, data: dict) -> dict:
    """Check a full product payload and return the cleaned values.

    Prices must be positive and the sale price must exceed the purchase price
    so every product sells at a margin.
    """

    cleaned = {
        "code": fields.text(data, "code", required=True, max_length=20),
        "name": fields.text(data, "name", required=True, max_length=100),
        "description": fields.text(data, "description", max_length=500),
        "brand": fields.text(data, "brand", max_length=50),
        "model": fields.text(data, "model", max_length=50),
        "warehouse_location": fields.text(data, "warehouse_location", max_length=50),
        "image_url": fields.text(data, "image_url", max_length=255),
        "category_id": fields.positive_id(data, "category_id", label="category"),
        "purchase_price": fields.money(data, "purchase_price", positive=True),
        "sale_price": fields.money(data, "sale_price", positive=True),
    }
    if cleaned["sale_price"] <= cleaned["purchase_price"]:
        raise ValidationFailed(
            "sale_price must be greater than purchase_price",
            details={"purchase_price": str(cleaned["purchase_price"]), "sale_price": str(cleaned["sale_price"])},
        )
    min_stock = data.get("min_stock")
    min_stock = 5 if min_stock is None else int(min_stock)
    if min_stock < 0:
        raise ValidationFailed("min_stock cannot be negative", details={"field": "min_stock"})
    cleaned["min_stock"] = min_stock
    if data.get("active") is not None:
        cleaned["active"] = bool(data["active"])

    category = get_category(db, cleaned["category_id"])
    if category is None or not category.active:
        raise ValidationFailed(f"Category {cleaned['category_id']} does not exist or is inactive")
    return cleaned


def create_product(db: Session, payload: dict) -> Product:
    product = repo.create_product(db, validate_product(db, payload))
    logger.info("Product created: %s %s (id=%s)", product.code, product.name, product.id)
    return product


def update_product(db: Session, product: Product, payload: dict) -> Product:
    data = validate_product(db, fields.merged(product, payload, repo.PRODUCT_FIELDS))
    product = repo.update_product(db, product, data)
    logger.info("Product updated: %s (id=%s)", product.code, product.id)
    return product


def delete_product(db: Session, product: Product) -> Product:
    product = repo.delete_product(db, product)
    logger.info("Product deactivated: %s (id=%s)", product.code, product.id)
    return product


def update_stock(db: Session, product_id: int, quantity: int, movement: StockMovement | str) -> int:
    """Manual stock entry (``in``) or withdrawal (``out``)."""

    if quantity is None or int(quantity) <= 0:
        raise ValidationFailed("quantity must be greater than zero", details={"field": "quantity"})
    try:
        movement = StockMovement(movement)
    except ValueError as exc:
        raise ValidationFailed(f"Unknown stock movement '{movement}'") from exc
    if repo.get_product(db, product_id) is None:
        raise NotFoundError(f"Product {product_id} not found")
    try:
        remaining = repo.adjust_stock(db, product_id, int(quantity), movement)
    except ValidationFailed:
        logger.warning("Stock %s of %s rejected for product %s", movement.value, quantity, product_id)
        raise
    logger.info("Stock %s of %s for product %s; now %s", movement.value, quantity, product_id, remaining)
    return remaining
