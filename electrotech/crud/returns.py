from __future__ import annotations

from datetime import datetime
from typing import Iterable

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, selectinload

from ..core.errors import ConflictError
from ..models.sale import Sale, SaleStatus
from ..models.sales_return import ReturnStatus, SalesReturn
from .stock import increase_stock

RETURN_FIELDS = ("sale_id", "returned_on", "reason", "amount")


def list_returns(db: Session, limit: int = 200, offset: int = 0) -> list[SalesReturn]:
    stmt = (
        select(SalesReturn)
        .order_by(desc(SalesReturn.returned_on), desc(SalesReturn.id))
        .limit(limit)
        .offset(offset)
    )
    return db.execute(stmt).scalars().all()


def get_return(db: Session, return_id: int) -> SalesReturn | None:
    return db.get(SalesReturn, return_id)


def list_returns_by_sale(db: Session, sale_id: int) -> list[SalesReturn]:
    stmt = select(SalesReturn).where(SalesReturn.sale_id == sale_id).order_by(SalesReturn.id)
    return db.execute(stmt).scalars().all()


def sale_has_return(
    db: Session,
    sale_id: int,
    statuses: Iterable[ReturnStatus] | None = None,
    exclude_id: int | None = None,
) -> bool:
    stmt = select(func.count(SalesReturn.id)).where(SalesReturn.sale_id == sale_id)
    if statuses is not None:
        stmt = stmt.where(SalesReturn.status.in_([ReturnStatus(status).value for status in statuses]))
    if exclude_id is not None:
        stmt = stmt.where(SalesReturn.id != exclude_id)
    return bool(db.execute(stmt).scalar())


def list_sales_with_returns(db: Session) -> list[Sale]:
    returned = select(SalesReturn.sale_id).distinct()
    stmt = (
        select(Sale)
        .options(selectinload(Sale.lines))
        .where(Sale.id.in_(returned))
        .order_by(desc(Sale.sold_at), desc(Sale.id))
    )
    return db.execute(stmt).scalars().all()


def create_return(db: Session, data: dict) -> SalesReturn:
    sales_return = SalesReturn(**{key: data[key] for key in RETURN_FIELDS if key in data})
    sales_return.status = ReturnStatus.PENDING.value
    db.add(sales_return)
    db.commit()
    db.refresh(sales_return)
    return sales_return


def require_pending(sales_return: SalesReturn, action: str) -> None:
    if sales_return.status != ReturnStatus.PENDING.value:
        raise ConflictError(
            f"Return {sales_return.credit_note_number} is {sales_return.status}; only pending returns can be {action}"
        )


def update_return(db: Session, sales_return: SalesReturn, data: dict) -> SalesReturn:
    require_pending(sales_return, "edited")
    for key in RETURN_FIELDS:
        if key in data:
            setattr(sales_return, key, data[key])
    db.commit()
    db.refresh(sales_return)
    return sales_return


def process_return(db: Session, sales_return: SalesReturn) -> SalesReturn:
    """Restock every line of the returned sale and close the return."""

    require_pending(sales_return, "processed")
    if sales_return.sale.status == SaleStatus.VOIDED.value:
        raise ConflictError(f"Sale {sales_return.invoice_number} was voided; its stock is already back on the shelf")
    try:
        for line in sales_return.sale.lines:
            increase_stock(db, line.product_id, line.quantity)
        sales_return.status = ReturnStatus.PROCESSED.value
        sales_return.processed_at = datetime.now()
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(sales_return)
    return sales_return


def reject_return(db: Session, sales_return: SalesReturn) -> SalesReturn:
    require_pending(sales_return, "rejected")
    sales_return.status = ReturnStatus.REJECTED.value
    sales_return.processed_at = datetime.now()
    db.commit()
    db.refresh(sales_return)
    return sales_return
