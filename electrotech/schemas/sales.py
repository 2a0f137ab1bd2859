from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.sale import SaleStatus


class SaleLineIn(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Optional[Decimal] = None
    discount: Decimal = Decimal("0")


class SaleCreate(BaseModel):
    client_id: int
    employee_id: int
    payment_method_id: int
    sold_at: Optional[datetime] = None
    invoice_number: Optional[str] = None
    discount: Decimal = Decimal("0")
    notes: Optional[str] = None
    status: SaleStatus = SaleStatus.COMPLETED
    lines: List[SaleLineIn] = Field(min_length=1)


class SaleUpdate(BaseModel):
    client_id: Optional[int] = None
    employee_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    sold_at: Optional[datetime] = None
    discount: Optional[Decimal] = None
    notes: Optional[str] = None
    status: Optional[SaleStatus] = None
    lines: Optional[List[SaleLineIn]] = None


class SaleLineOut(BaseModel):
    id: int
    product_id: int
    product_code: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    discount: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class SaleOut(BaseModel):
    id: int
    invoice_number: str
    sold_at: datetime
    client_id: int
    client_name: Optional[str] = None
    employee_id: int
    employee_name: Optional[str] = None
    payment_method_id: int
    payment_method_name: Optional[str] = None
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    notes: Optional[str]
    status: str
    lines: List[SaleLineOut] = []

    class Config:
        from_attributes = True
