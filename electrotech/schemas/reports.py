from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from .catalog import ProductOut


class ProductSalesRow(BaseModel):
    product_id: int
    code: str
    name: str
    category: Optional[str]
    quantity: int
    revenue: Decimal


class ClientSalesRow(BaseModel):
    client_id: int
    name: str
    document: str
    purchases: int
    amount: Decimal


class SalesReportOut(BaseModel):
    start: date
    end: date
    sales_count: int
    total_sales: Decimal
    daily_average: Decimal
    previous_total: Decimal
    growth_pct: Decimal
    top_products: List[ProductSalesRow]


class InventoryReportOut(BaseModel):
    active_products: int
    total_units: int
    total_value: Decimal
    below_minimum: List[ProductOut]
    stale_products: List[ProductOut]


class DashboardOut(BaseModel):
    product_count: int
    low_stock_count: int
    monthly_sales_total: Decimal
