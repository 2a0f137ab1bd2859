"""CRUD helpers for product categories."""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..models.category import Category
from ..models.product import Product


def list_categories(db: Session, include_inactive: bool = False) -> list[Category]:
    stmt = select(Category)
    if not include_inactive:
        stmt = stmt.where(Category.active.is_(True))
    return db.execute(stmt.order_by(Category.name)).scalars().all()


def get_category(db: Session, category_id: int) -> Category | None:
    return db.get(Category, category_id)


def search_categories(db: Session, term: str) -> list[Category]:
    pattern = f"%{term.strip().lower()}%"
    stmt = (
        select(Category)
        .where(
            Category.active.is_(True),
            or_(
                func.lower(Category.name).like(pattern),
                func.lower(func.coalesce(Category.description, "")).like(pattern),
            ),
        )
        .order_by(Category.name)
    )
    return db.execute(stmt).scalars().all()


def name_taken(db: Session, name: str, exclude_id: int | None = None) -> bool:
    stmt = select(func.count(Category.id)).where(func.lower(Category.name) == name.strip().lower())
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    return bool(db.execute(stmt).scalar())


def count_products(db: Session, category_id: int) -> int:
    stmt = select(func.count(Product.id)).where(Product.category_id == category_id)
    return int(db.execute(stmt).scalar() or 0)


def create_category(db: Session, data: dict) -> Category:
    if name_taken(db, data["name"]):
        raise ConflictError(f"A category named '{data['name']}' already exists")
    category = Category(
        name=data["name"],
        description=data.get("description"),
        active=data.get("active", True),
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category: Category, data: dict) -> Category:
    if "name" in data and name_taken(db, data["name"], exclude_id=category.id):
        raise ConflictError(f"Another category is already named '{data['name']}'")
    for field in ("name", "description", "active"):
        if field in data:
            setattr(category, field, data[field])
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category: Category) -> Category:
    """Soft-delete a category that no product references."""

    in_use = count_products(db, category.id)
    if in_use:
        raise ConflictError(
            f"Category '{category.name}' is used by {in_use} product(s) and cannot be deleted",
            details={"products": in_use},
        )
    category.active = False
    db.commit()
    db.refresh(category)
    return category
