from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import clients as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.parties import ClientCreate, ClientOut, ClientUpdate
from ..services import clients as service

router = APIRouter(prefix="/api/v1/clients", tags=["clients"], dependencies=[Depends(require_module(Module.CLIENTS))])


@router.get("", response_model=list[ClientOut])
def api_list_clients(q: Optional[str] = None, include_inactive: bool = False, db: Session = Depends(get_db)):
    if q:
        return repo.search_clients(db, q)
    return repo.list_clients(db, include_inactive=include_inactive)


@router.post("", response_model=ClientOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_client(payload: ClientCreate, db: Session = Depends(get_db)):
    return service.create_client(db, payload.model_dump())


@router.get("/{client_id}", response_model=ClientOut)
def api_get_client(client_id: int, db: Session = Depends(get_db)):
    client = repo.get_client(db, client_id)
    if not client:
        raise HTTPException(404, "Not found")
    return client


@router.patch("/{client_id}", response_model=ClientOut, dependencies=[Depends(require_write)])
def api_update_client(client_id: int, payload: ClientUpdate, db: Session = Depends(get_db)):
    client = repo.get_client(db, client_id)
    if not client:
        raise HTTPException(404, "Not found")
    return service.update_client(db, client, payload.model_dump(exclude_unset=True))


@router.delete("/{client_id}", dependencies=[Depends(require_write)])
def api_delete_client(client_id: int, db: Session = Depends(get_db)):
    client = repo.get_client(db, client_id)
    if not client:
        raise HTTPException(404, "Not found")
    service.delete_client(db, client)
    return {"status": "deleted"}
