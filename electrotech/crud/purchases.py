"""Supplier purchase orders and the stock they bring in when received."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, selectinload

from ..core.errors import ConflictError
from ..models.purchase import Purchase, PurchaseLine, PurchaseStatus
from .stock import increase_stock

ORDER_PREFIX = "CO"
HEADER_FIELDS = ("order_number", "ordered_at", "supplier_id", "subtotal", "tax", "total", "notes")


def _base_query():
    return select(Purchase).options(selectinload(Purchase.lines))


def list_purchases(db: Session, limit: int = 200, offset: int = 0) -> list[Purchase]:
    stmt = _base_query().order_by(desc(Purchase.ordered_at), desc(Purchase.id)).limit(limit).offset(offset)
    return db.execute(stmt).scalars().all()


def get_purchase(db: Session, purchase_id: int) -> Purchase | None:
    stmt = _base_query().where(Purchase.id == purchase_id)
    return db.execute(stmt).scalars().first()


def get_purchase_by_order_number(db: Session, order_number: str) -> Purchase | None:
    stmt = _base_query().where(Purchase.order_number == order_number.strip())
    return db.execute(stmt).scalars().first()


def list_purchases_by_date_range(db: Session, start: date, end: date) -> list[Purchase]:
    stmt = (
        _base_query()
        .where(
            Purchase.ordered_at >= datetime.combine(start, time.min),
            Purchase.ordered_at < datetime.combine(end + timedelta(days=1), time.min),
        )
        .order_by(desc(Purchase.ordered_at), desc(Purchase.id))
    )
    return db.execute(stmt).scalars().all()


def list_purchases_by_supplier(db: Session, supplier_id: int) -> list[Purchase]:
    stmt = (
        _base_query()
        .where(Purchase.supplier_id == supplier_id)
        .order_by(desc(Purchase.ordered_at), desc(Purchase.id))
    )
    return db.execute(stmt).scalars().all()


def list_purchases_by_status(db: Session, status: PurchaseStatus | str) -> list[Purchase]:
    stmt = (
        _base_query()
        .where(Purchase.status == PurchaseStatus(status).value)
        .order_by(desc(Purchase.ordered_at), desc(Purchase.id))
    )
    return db.execute(stmt).scalars().all()


def next_order_number(db: Session, today: date | None = None) -> str:
    """``COYYYYMMDDNNNN`` where NNNN counts the orders already placed that day."""

    today = today or date.today()
    prefix = f"{ORDER_PREFIX}{today:%Y%m%d}"
    stmt = select(func.count(Purchase.id)).where(Purchase.order_number.like(f"{prefix}%"))
    issued = int(db.execute(stmt).scalar() or 0)
    candidate = f"{prefix}{issued + 1:04d}"
    # A manually numbered order may already hold the counted slot.
    while order_number_taken(db, candidate):
        issued += 1
        candidate = f"{prefix}{issued + 1:04d}"
    return candidate


def order_number_taken(db: Session, order_number: str, exclude_id: int | None = None) -> bool:
    stmt = select(func.count(Purchase.id)).where(Purchase.order_number == order_number)
    if exclude_id is not None:
        stmt = stmt.where(Purchase.id != exclude_id)
    return bool(db.execute(stmt).scalar())


def _build_lines(lines: list[dict]) -> list[PurchaseLine]:
    return [
        PurchaseLine(
            product_id=line["product_id"],
            quantity=line["quantity"],
            unit_price=line["unit_price"],
            subtotal=line["subtotal"],
        )
        for line in lines
    ]


def _stock_in(db: Session, purchase: Purchase) -> None:
    for line in purchase.lines:
        increase_stock(db, line.product_id, line.quantity)
    purchase.received_at = datetime.now()


def create_purchase(db: Session, data: dict) -> Purchase:
    """Insert an order. Orders created as already received add stock at once."""

    try:
        if order_number_taken(db, data["order_number"]):
            raise ConflictError(f"Order number {data['order_number']} already exists")
        purchase = Purchase(**{key: data[key] for key in HEADER_FIELDS if key in data})
        purchase.status = PurchaseStatus(data.get("status") or PurchaseStatus.PENDING).value
        purchase.lines = _build_lines(data["lines"])
        db.add(purchase)
        db.flush()
        if purchase.status == PurchaseStatus.RECEIVED.value:
            _stock_in(db, purchase)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_purchase(db, purchase.id)


def require_pending(purchase: Purchase, action: str) -> None:
    if purchase.status != PurchaseStatus.PENDING.value:
        raise ConflictError(
            f"Purchase {purchase.order_number} is {purchase.status}; only pending orders can be {action}"
        )


def update_purchase(db: Session, purchase: Purchase, data: dict) -> Purchase:
    require_pending(purchase, "edited")
    try:
        if "order_number" in data and order_number_taken(db, data["order_number"], exclude_id=purchase.id):
            raise ConflictError(f"Order number {data['order_number']} already exists")
        for key in HEADER_FIELDS:
            if key in data:
                setattr(purchase, key, data[key])
        if "lines" in data:
            purchase.lines.clear()
            db.flush()
            purchase.lines.extend(_build_lines(data["lines"]))
            db.flush()
        status = PurchaseStatus(data.get("status") or purchase.status)
        if status is PurchaseStatus.RECEIVED:
            _stock_in(db, purchase)
        purchase.status = status.value
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_purchase(db, purchase.id)


def receive_purchase(db: Session, purchase: Purchase) -> Purchase:
    require_pending(purchase, "received")
    try:
        _stock_in(db, purchase)
        purchase.status = PurchaseStatus.RECEIVED.value
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_purchase(db, purchase.id)


def cancel_purchase(db: Session, purchase: Purchase) -> Purchase:
    require_pending(purchase, "cancelled")
    purchase.status = PurchaseStatus.CANCELLED.value
    db.commit()
    return get_purchase(db, purchase.id)
