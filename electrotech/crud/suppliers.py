from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..models.supplier import Supplier

SUPPLIER_FIELDS = ("name", "address", "phone", "email", "contact_name", "payment_terms", "active")


def list_suppliers(db: Session, include_inactive: bool = False) -> list[Supplier]:
    stmt = select(Supplier)
    if not include_inactive:
        stmt = stmt.where(Supplier.active.is_(True))
    return db.execute(stmt.order_by(Supplier.name)).scalars().all()


def get_supplier(db: Session, supplier_id: int) -> Supplier | None:
    return db.get(Supplier, supplier_id)


def search_suppliers(db: Session, term: str) -> list[Supplier]:
    pattern = f"%{term.strip().lower()}%"
    stmt = (
        select(Supplier)
        .where(
            Supplier.active.is_(True),
            or_(
                func.lower(Supplier.name).like(pattern),
                func.lower(func.coalesce(Supplier.contact_name, "")).like(pattern),
                func.lower(func.coalesce(Supplier.email, "")).like(pattern),
                func.lower(func.coalesce(Supplier.phone, "")).like(pattern),
            ),
        )
        .order_by(Supplier.name)
    )
    return db.execute(stmt).scalars().all()


def create_supplier(db: Session, data: dict) -> Supplier:
    supplier = Supplier(**{key: data[key] for key in SUPPLIER_FIELDS if key in data})
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def update_supplier(db: Session, supplier: Supplier, data: dict) -> Supplier:
    for key in SUPPLIER_FIELDS:
        if key in data:
            setattr(supplier, key, data[key])
    db.commit()
    db.refresh(supplier)
    return supplier


def delete_supplier(db: Session, supplier: Supplier) -> Supplier:
    supplier.active = False
    db.commit()
    db.refresh(supplier)
    return supplier
