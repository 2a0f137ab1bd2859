from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.purchase import PurchaseStatus


class PurchaseLineIn(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(gt=0)
    subtotal: Optional[Decimal] = None


class PurchaseCreate(BaseModel):
    supplier_id: int
    order_number: Optional[str] = None
    ordered_at: Optional[datetime] = None
    status: PurchaseStatus = PurchaseStatus.PENDING
    notes: Optional[str] = None
    subtotal: Optional[Decimal] = None
    tax: Decimal = Decimal("0")
    total: Optional[Decimal] = None
    lines: List[PurchaseLineIn] = Field(min_length=1)


class PurchaseUpdate(BaseModel):
    supplier_id: Optional[int] = None
    order_number: Optional[str] = None
    ordered_at: Optional[datetime] = None
    status: Optional[PurchaseStatus] = None
    notes: Optional[str] = None
    subtotal: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    total: Optional[Decimal] = None
    lines: Optional[List[PurchaseLineIn]] = None


class PurchaseLineOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class PurchaseOut(BaseModel):
    id: int
    order_number: str
    ordered_at: datetime
    supplier_id: int
    supplier_name: Optional[str] = None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: str
    notes: Optional[str]
    received_at: Optional[datetime]
    lines: List[PurchaseLineOut] = []

    class Config:
        from_attributes = True


class OrderNumberOut(BaseModel):
    order_number: str
