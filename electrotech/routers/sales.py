from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..crud import sales as repo
from ..db.session import get_db
from ..deps.auth import require_module, require_write
from ..models.sale import SaleStatus
from ..schemas.sales import SaleCreate, SaleOut, SaleUpdate
from ..services import documents
from ..services import sales as service

router = APIRouter(prefix="/api/v1/sales", tags=["sales"], dependencies=[Depends(require_module(Module.SALES))])


def _load(db: Session, sale_id: int):
    sale = repo.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(404, "Not found")
    return sale


@router.get("", response_model=list[SaleOut])
def api_list_sales(
    start: Optional[date] = None,
    end: Optional[date] = None,
    client_id: Optional[int] = None,
    status: Optional[SaleStatus] = None,
    invoice_number: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if invoice_number:
        sale = repo.get_sale_by_invoice(db, invoice_number)
        return [sale] if sale else []
    if start or end:
        return repo.list_sales_by_date_range(db, start or date.min, end or date.today())
    if client_id is not None:
        return repo.list_sales_by_client(db, client_id)
    if status is not None:
        return repo.list_sales_by_status(db, status)
    return repo.list_sales(db)


@router.post("", response_model=SaleOut, status_code=201, dependencies=[Depends(require_write)])
def api_create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    return service.create_sale(db, payload.model_dump(mode="python"))


@router.get("/{sale_id}", response_model=SaleOut)
def api_get_sale(sale_id: int, db: Session = Depends(get_db)):
    return _load(db, sale_id)


@router.patch("/{sale_id}", response_model=SaleOut, dependencies=[Depends(require_write)])
def api_update_sale(sale_id: int, payload: SaleUpdate, db: Session = Depends(get_db)):
    sale = _load(db, sale_id)
    return service.update_sale(db, sale, payload.model_dump(exclude_unset=True))


@router.post("/{sale_id}/complete", response_model=SaleOut, dependencies=[Depends(require_write)])
def api_complete_sale(sale_id: int, db: Session = Depends(get_db)):
    return service.complete_sale(db, _load(db, sale_id))


@router.post("/{sale_id}/void", response_model=SaleOut, dependencies=[Depends(require_write)])
def api_void_sale(sale_id: int, db: Session = Depends(get_db)):
    return service.void_sale(db, _load(db, sale_id))


@router.get("/{sale_id}/invoice", response_class=PlainTextResponse)
def api_sale_invoice(sale_id: int, db: Session = Depends(get_db)):
    return PlainTextResponse(documents.render_invoice_text(_load(db, sale_id)))


@router.get("/{sale_id}/invoice.pdf")
def api_sale_invoice_pdf(sale_id: int, db: Session = Depends(get_db)):
    sale = _load(db, sale_id)
    return Response(
        content=documents.render_invoice_pdf(sale),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{sale.invoice_number}.pdf"'},
    )
