from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ReturnCreate(BaseModel):
    sale_id: int
    returned_on: Optional[date] = None
    reason: str
    amount: Decimal


class ReturnUpdate(BaseModel):
    returned_on: Optional[date] = None
    reason: Optional[str] = None
    amount: Optional[Decimal] = None


class ReturnOut(BaseModel):
    id: int
    credit_note_number: str
    sale_id: int
    invoice_number: Optional[str] = None
    returned_on: date
    reason: str
    amount: Decimal
    status: str
    processed_at: Optional[datetime]

    class Config:
        from_attributes = True
