from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, ValidationFailed
from ..models.payment_method import PaymentMethod


def list_payment_methods(db: Session, active_only: bool = False) -> list[PaymentMethod]:
    stmt = select(PaymentMethod)
    if active_only:
        stmt = stmt.where(PaymentMethod.active.is_(True))
    return db.execute(stmt.order_by(PaymentMethod.name)).scalars().all()


def get_payment_method(db: Session, method_id: int) -> PaymentMethod | None:
    return db.get(PaymentMethod, method_id)


def get_payment_method_by_name(db: Session, name: str) -> PaymentMethod | None:
    stmt = select(PaymentMethod).where(func.lower(PaymentMethod.name) == name.strip().lower())
    return db.execute(stmt).scalars().first()


def _clean_name(data: dict) -> str:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationFailed("name is required")
    return name


def create_payment_method(db: Session, data: dict) -> PaymentMethod:
    name = _clean_name(data)
    if get_payment_method_by_name(db, name):
        raise ConflictError(f"A payment method named '{name}' already exists")
    method = PaymentMethod(
        name=name,
        description=(data.get("description") or None),
        active=data.get("active", True),
    )
    db.add(method)
    db.commit()
    db.refresh(method)
    return method


def update_payment_method(db: Session, method: PaymentMethod, data: dict) -> PaymentMethod:
    if "name" in data:
        name = _clean_name(data)
        owner = get_payment_method_by_name(db, name)
        if owner is not None and owner.id != method.id:
            raise ConflictError(f"Another payment method is already named '{name}'")
        method.name = name
    if "description" in data:
        method.description = data.get("description") or None
    if "active" in data:
        method.active = bool(data["active"])
    db.commit()
    db.refresh(method)
    return method


def delete_payment_method(db: Session, method: PaymentMethod) -> PaymentMethod:
    method.active = False
    db.commit()
    db.refresh(method)
    return method
