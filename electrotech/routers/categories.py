from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import categories as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.catalog import CategoryCreate, CategoryOut, CategoryUpdate
from ..services import categories as service

router = APIRouter(
    prefix="/api/v1/categories",
    tags=["categories"],
    dependencies=[Depends(require_module(Module.CATEGORIES))],
)


@router.get("", response_model=list[CategoryOut])
def api_list_categories(q: Optional[str] = None, include_inactive: bool = False, db: Session = Depends(get_db)):
    if q:
        return repo.search_categories(db, q)
    return repo.list_categories(db, include_inactive=include_inactive)


@router.post("", response_model=CategoryOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return service.create_category(db, payload.model_dump())


@router.get("/{category_id}", response_model=CategoryOut)
def api_get_category(category_id: int, db: Session = Depends(get_db)):
    category = repo.get_category(db, category_id)
    if not category:
        raise HTTPException(404, "Not found")
    return category


@router.patch("/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_write)])
def api_update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    category = repo.get_category(db, category_id)
    if not category:
        raise HTTPException(404, "Not found")
    return service.update_category(db, category, payload.model_dump(exclude_unset=True))


@router.delete("/{category_id}", dependencies=[Depends(require_write)])
def api_delete_category(category_id: int, db: Session = Depends(get_db)):
    category = repo.get_category(db, category_id)
    if not category:
        raise HTTPException(404, "Not found")
    service.delete_category(db, category)
    return {"status": "deleted"}
