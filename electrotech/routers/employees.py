from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import employees as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..schemas.parties import EmployeeCreate, EmployeeOut, EmployeeUpdate
from ..services import employees as service

router = APIRouter(
    prefix="/api/v1/employees",
    tags=["employees"],
    dependencies=[Depends(require_module(Module.EMPLOYEES))],
)


def _split(payload: dict) -> tuple[dict, dict | None]:
    account = payload.pop("account", None)
    if account is not None:
        account = {key: value for key, value in account.items() if value is not None}
    return payload, account


@router.get("", response_model=list[EmployeeOut])
def api_list_employees(q: Optional[str] = None, include_inactive: bool = False, db: Session = Depends(get_db)):
    if q:
        return repo.search_employees(db, q)
    return repo.list_employees(db, include_inactive=include_inactive)


@router.post("", response_model=EmployeeOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    data, account = _split(payload.model_dump())
    return service.create_employee(db, data, account)


@router.get("/{employee_id}", response_model=EmployeeOut)
def api_get_employee(employee_id: int, db: Session = Depends(get_db)):
    employee = repo.get_employee(db, employee_id)
    if not employee:
        raise HTTPException(404, "Not found")
    return employee


@router.patch("/{employee_id}", response_model=EmployeeOut, dependencies=[Depends(require_write)])
def api_update_employee(employee_id: int, payload: EmployeeUpdate, db: Session = Depends(get_db)):
    employee = repo.get_employee(db, employee_id)
    if not employee:
        raise HTTPException(404, "Not found")
    data, account = _split(payload.model_dump(exclude_unset=True))
    return service.update_employee(db, employee, data, account)


@router.delete("/{employee_id}", dependencies=[Depends(require_write)])
def api_delete_employee(employee_id: int, db: Session = Depends(get_db)):
    employee = repo.get_employee(db, employee_id)
    if not employee:
        raise HTTPException(404, "Not found")
    service.delete_employee(db, employee)
    return {"status": "deleted"}
