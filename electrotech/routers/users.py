from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import users as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.auth import AuditLogEntryOut, UserCreate, UserOut, UserUpdate
from ..services import auth as auth_service

router = APIRouter(prefix="/api/v1/users", tags=["users"], dependencies=[Depends(require_module(Module.USERS))])


@router.get("", response_model=list[UserOut])
def api_list_users(db: Session = Depends(get_db)):
    return repo.list_users(db)


@router.post("", response_model=UserOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return auth_service.create_user(db, payload.model_dump())


@router.get(
    "/audit-log",
    response_model=list[AuditLogEntryOut],
    dependencies=[Depends(require_module(Module.AUDIT_LOG))],
)
def api_audit_log(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return repo.list_audit_log(db, start, end)


@router.get("/{user_id}", response_model=UserOut)
def api_get_user(user_id: int, db: Session = Depends(get_db)):
    user = repo.get_user(db, user_id)
    if not user:
        raise HTTPException(404, "Not found")
    return user


@router.patch("/{user_id}", response_model=UserOut, dependencies=[Depends(require_write)])
def api_update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    user = repo.get_user(db, user_id)
    if not user:
        raise HTTPException(404, "Not found")
    return auth_service.update_user(db, user, payload.model_dump(exclude_unset=True))
