from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import purchases as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..models.purchase import PurchaseStatus
from ..schemas.purchases import OrderNumberOut, PurchaseCreate, PurchaseOut, PurchaseUpdate
from ..services import purchases as service

router = APIRouter(
    prefix="/api/v1/purchases",
    tags=["purchases"],
    dependencies=[Depends(require_module(Module.PURCHASES))],
)


def _load(db: Session, purchase_id: int):
    purchase = repo.get_purchase(db, purchase_id)
    if not purchase:
        raise HTTPException(404, "Not found")
    return purchase


@router.get("", response_model=list[PurchaseOut])
def api_list_purchases(
    start: Optional[date] = None,
    end: Optional[date] = None,
    supplier_id: Optional[int] = None,
    status: Optional[PurchaseStatus] = None,
    order_number: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if order_number:
        purchase = repo.get_purchase_by_order_number(db, order_number)
        return [purchase] if purchase else []
    if start or end:
        return repo.list_purchases_by_date_range(db, start or date.min, end or date.today())
    if supplier_id is not None:
        return repo.list_purchases_by_supplier(db, supplier_id)
    if status is not None:
        return repo.list_purchases_by_status(db, status)
    return repo.list_purchases(db)


@router.get("/next-order-number", response_model=OrderNumberOut)
def api_next_order_number(db: Session = Depends(get_db)):
    return OrderNumberOut(order_number=service.next_order_number(db))


@router.post("", response_model=PurchaseOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_purchase(payload: PurchaseCreate, db: Session = Depends(get_db)):
    return service.create_purchase(db, payload.model_dump(mode="python"))


@router.get("/{purchase_id}", response_model=PurchaseOut)
def api_get_purchase(purchase_id: int, db: Session = Depends(get_db)):
    return _load(db, purchase_id)


@router.patch("/{purchase_id}", response_model=PurchaseOut, dependencies=[Depends(require_write)])
def api_update_purchase(purchase_id: int, payload: PurchaseUpdate, db: Session = Depends(get_db)):
    purchase = _load(db, purchase_id)
    return service.update_purchase(db, purchase, payload.model_dump(exclude_unset=True))


@router.post("/{purchase_id}/receive", response_model=PurchaseOut, dependencies=[Depends(require_write)])
def api_receive_purchase(purchase_id: int, db: Session = Depends(get_db)):
    return service.receive_purchase(db, _load(db, purchase_id))


@router.post("/{purchase_id}/cancel", response_model=PurchaseOut, dependencies=[Depends(require_write)])
def api_cancel_purchase(purchase_id: int, db: Session = Depends(get_db)):
    return service.cancel_purchase(db, _load(db, purchase_id))
