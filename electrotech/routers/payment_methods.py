from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud.payment_methods import list_payment_methods
from ..db.session import get_db
from ..deps.auth import require_module
from ..schemas.parties import PaymentMethodOut

router = APIRouter(
    prefix="/api/v1/payment-methods",
    tags=["payment-methods"],
    dependencies=[Depends(require_module(Module.SALES))],
)


@router.get("", response_model=list[PaymentMethodOut])
def api_list_payment_methods(active_only: bool = True, db: Session = Depends(get_db)):
    return list_payment_methods(db, active_only=active_only)
