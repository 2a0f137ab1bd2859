"""Request and response bodies for categories, products and stock."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..crud.products import StockMovement


class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None


class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    active: bool

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    category_id: int
    brand: Optional[str] = None
    model: Optional[str] = None
    purchase_price: Decimal
    sale_price: Decimal
    min_stock: Optional[int] = None
    warehouse_location: Optional[str] = None
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    purchase_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None
    min_stock: Optional[int] = None
    warehouse_location: Optional[str] = None
    image_url: Optional[str] = None
    active: Optional[bool] = None


class ProductOut(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str]
    category_id: int
    category_name: Optional[str] = None
    brand: Optional[str]
    model: Optional[str]
    purchase_price: Decimal
    sale_price: Decimal
    min_stock: int
    warehouse_location: Optional[str]
    image_url: Optional[str]
    active: bool
    stock: int
    margin: Decimal
    margin_pct: Decimal
    needs_restock: bool

    class Config:
        from_attributes = True


class StockAdjustment(BaseModel):
    quantity: int = Field(gt=0)
    movement: StockMovement


class StockOut(BaseModel):
    product_id: int
    stock: int
