"""Clients, suppliers, employees and payment methods."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ClientCreate(BaseModel):
    document_type: str
    document_number: str
    first_name: str
    last_name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class ClientUpdate(BaseModel):
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    active: Optional[bool] = None


class ClientOut(BaseModel):
    id: int
    document_type: str
    document_number: str
    first_name: str
    last_name: str
    full_name: str
    address: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    registered_at: datetime
    active: bool

    class Config:
        from_attributes = True


class SupplierCreate(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    payment_terms: Optional[str] = None


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    payment_terms: Optional[str] = None
    active: Optional[bool] = None


class SupplierOut(BaseModel):
    id: int
    name: str
    address: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    contact_name: Optional[str]
    payment_terms: Optional[str]
    active: bool

    class Config:
        from_attributes = True


class EmployeeAccount(BaseModel):
    """Optional user account created or updated together with an employee."""

    username: Optional[str] = None
    password: Optional[str] = None
    level: Optional[int] = None
    email: Optional[str] = None
    active: Optional[bool] = None


class EmployeeCreate(BaseModel):
    document_type: str
    document_number: str
    first_name: str
    last_name: str
    address: Optional[str] = None
    phone: str
    hired_on: date
    base_salary: Decimal
    account: Optional[EmployeeAccount] = None


class EmployeeUpdate(BaseModel):
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    hired_on: Optional[date] = None
    base_salary: Optional[Decimal] = None
    active: Optional[bool] = None
    account: Optional[EmployeeAccount] = None


class EmployeeOut(BaseModel):
    id: int
    document_type: str
    document_number: str
    first_name: str
    last_name: str
    full_name: str
    address: Optional[str]
    phone: str
    hired_on: date
    base_salary: Decimal
    user_id: Optional[int]
    username: Optional[str] = None
    active: bool

    class Config:
        from_attributes = True


class PaymentMethodOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    active: bool

    class Config:
        from_attributes = True
