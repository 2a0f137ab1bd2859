from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import suppliers as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.parties import SupplierCreate, SupplierOut, SupplierUpdate
from ..services import suppliers as service

router = APIRouter(
    prefix="/api/v1/suppliers",
    tags=["suppliers"],
    dependencies=[Depends(require_module(Module.SUPPLIERS))],
)


@router.get("", response_model=list[SupplierOut])
def api_list_suppliers(q: Optional[str] = None, include_inactive: bool = False, db: Session = Depends(get_db)):
    if q:
        return repo.search_suppliers(db, q)
    return repo.list_suppliers(db, include_inactive=include_inactive)


@router.post("", response_model=SupplierOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    return service.create_supplier(db, payload.model_dump())


@router.get("/{supplier_id}", response_model=SupplierOut)
def api_get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    supplier = repo.get_supplier(db, supplier_id)
    if not supplier:
        raise HTTPException(404, "Not found")
    return supplier


@router.patch("/{supplier_id}", response_model=SupplierOut, dependencies=[Depends(require_write)])
def api_update_supplier(supplier_id: int, payload: SupplierUpdate, db: Session = Depends(get_db)):
    supplier = repo.get_supplier(db, supplier_id)
    if not supplier:
        raise HTTPException(404, "Not found")
    return service.update_supplier(db, supplier, payload.model_dump(exclude_unset=True))


@router.delete("/{supplier_id}", dependencies=[Depends(require_write)])
def api_delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    supplier = repo.get_supplier(db, supplier_id)
    if not supplier:
        raise HTTPException(404, "Not found")
    service.delete_supplier(db, supplier)
    return {"status": "deleted"}
