from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import returns as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.returns import ReturnCreate, ReturnOut, ReturnUpdate
from ..services import documents
from ..services import returns as service

router = APIRouter(prefix="/api/v1/returns", tags=["returns"], dependencies=[Depends(require_module(Module.RETURNS))])


def _load(db: Session, return_id: int):
    sales_return = repo.get_return(db, return_id)
    if not sales_return:
        raise HTTPException(404, "Not found")
    return sales_return


@router.get("", response_model=list[ReturnOut])
def api_list_returns(sale_id: Optional[int] = None, db: Session = Depends(get_db)):
    if sale_id is not None:
        return repo.list_returns_by_sale(db, sale_id)
    return repo.list_returns(db)


@router.post("", response_model=ReturnOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_return(payload: ReturnCreate, db: Session = Depends(get_db)):
    return service.create_return(db, payload.model_dump(exclude_none=True))


@router.get("/{return_id}", response_model=ReturnOut)
def api_get_return(return_id: int, db: Session = Depends(get_db)):
    return _load(db, return_id)


@router.patch("/{return_id}", response_model=ReturnOut, dependencies=[Depends(require_write)])
def api_update_return(return_id: int, payload: ReturnUpdate, db: Session = Depends(get_db)):
    sales_return = _load(db, return_id)
    return service.update_return(db, sales_return, payload.model_dump(exclude_unset=True))


@router.post("/{return_id}/process", response_model=ReturnOut, dependencies=[Depends(require_write)])
def api_process_return(return_id: int, db: Session = Depends(get_db)):
    return service.process_return(db, _load(db, return_id))


@router.post("/{return_id}/reject", response_model=ReturnOut, dependencies=[Depends(require_write)])
def api_reject_return(return_id: int, db: Session = Depends(get_db)):
    return service.reject_return(db, _load(db, return_id))


@router.get("/{return_id}/credit-note", response_class=PlainTextResponse)
def api_credit_note(return_id: int, db: Session = Depends(get_db)):
    return PlainTextResponse(documents.render_credit_note_text(_load(db, return_id)))
