from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import products as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.catalog import ProductCreate, ProductOut, ProductUpdate, StockAdjustment, StockOut
from ..services import products as service

router = APIRouter(
    prefix="/api/v1/products",
    tags=["products"],
    dependencies=[Depends(require_module(Module.PRODUCTS))],
)


@router.get("", response_model=list[ProductOut])
def api_list_products(
    q: Optional[str] = None,
    category_id: Optional[int] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    if q:
        return repo.search_products(db, q)
    if category_id is not None:
        return repo.list_by_category(db, category_id)
    return repo.list_products(db, include_inactive=include_inactive)


@router.post("", response_model=ProductOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return service.create_product(db, payload.model_dump(exclude_none=True))


@router.get("/low-stock", response_model=list[ProductOut])
def api_low_stock(db: Session = Depends(get_db)):
    return repo.list_low_stock(db)


@router.get("/by-code/{code}", response_model=ProductOut)
def api_get_product_by_code(code: str, db: Session = Depends(get_db)):
    product = repo.get_product_by_code(db, code)
    if not product:
        raise HTTPException(404, "Not found")
    return product


@router.get("/{product_id}", response_model=ProductOut)
def api_get_product(product_id: int, db: Session = Depends(get_db)):
    product = repo.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Not found")
    return product


@router.patch("/{product_id}", response_model=ProductOut, dependencies=[Depends(require_write)])
def api_update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    product = repo.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Not found")
    return service.update_product(db, product, payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", dependencies=[Depends(require_write)])
def api_delete_product(product_id: int, db: Session = Depends(get_db)):
    product = repo.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Not found")
    service.delete_product(db, product)
    return {"status": "deleted"}


@router.post(
    "/{product_id}/stock",
    response_model=StockOut,
    dependencies=[Depends(require_module(Module.INVENTORY)), Depends(require_write)],
)
def api_adjust_stock(product_id: int, payload: StockAdjustment, db: Session = Depends(get_db)):
    if not repo.get_product(db, product_id):
        raise HTTPException(404, "Not found")
    stock = service.update_stock(db, product_id, payload.quantity, payload.movement)
    return StockOut(product_id=product_id, stock=stock)
