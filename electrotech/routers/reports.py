from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import Module
from ..db.session import get_db
from ..deps.auth import get_current_user, require_module
from ..schemas.catalog import ProductOut
from ..schemas.reports import (
    ClientSalesRow,
    DashboardOut,
    InventoryReportOut,
    ProductSalesRow,
    SalesReportOut,
)
from ..services import reports

router = APIRouter(prefix="/api/v1/reports", tags=["reports"], dependencies=[Depends(get_current_user)])


@router.get("/sales", response_model=SalesReportOut, dependencies=[Depends(require_module(Module.SALES_REPORT))])
def api_sales_report(start: date, end: date, db: Session = Depends(get_db)):
    return reports.sales_report(db, start, end)


@router.get(
    "/top-products",
    response_model=list[ProductSalesRow],
    dependencies=[Depends(require_module(Module.PRODUCTS_REPORT))],
)
def api_top_products(
    start: date,
    end: date,
    category_id: Optional[int] = None,
    limit: int = 10,
    db: Session = Depends(get_db),
):
    return reports.top_products(db, start, end, category_id=category_id, limit=limit)


@router.get(
    "/top-clients",
    response_model=list[ClientSalesRow],
    dependencies=[Depends(require_module(Module.CLIENTS_REPORT))],
)
def api_top_clients(
    start: date,
    end: date,
    order_by: Literal["amount", "count"] = "amount",
    limit: int = 10,
    db: Session = Depends(get_db),
):
    return reports.top_clients(db, start, end, order_by=order_by, limit=limit)


@router.get(
    "/inventory",
    response_model=InventoryReportOut,
    dependencies=[Depends(require_module(Module.INVENTORY_REPORT))],
)
def api_inventory_report(db: Session = Depends(get_db)):
    report = reports.inventory_report(db)
    for key in ("below_minimum", "stale_products"):
        report[key] = [ProductOut.model_validate(product) for product in report[key]]
    return report


@router.get("/dashboard", response_model=DashboardOut)
def api_dashboard(db: Session = Depends(get_db)):
    return reports.dashboard_summary(db)
