"""Catalog products and the single stock row each of them owns."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ..core.money import quantize_currency, to_decimal
from ..db.session import Base


class Product(Base):
    """Sellable item. ``stock`` and the margin figures are derived on read."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    brand = Column(String(50), nullable=True)
    model = Column(String(50), nullable=True)
    purchase_price = Column(Numeric(12, 2), nullable=False)
    sale_price = Column(Numeric(12, 2), nullable=False)
    min_stock = Column(Integer, nullable=False, default=5)
    warehouse_location = Column(String(50), nullable=True)
    image_url = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    category = relationship("Category", back_populates="products", lazy="joined")
    stock_row = relationship(
        "InventoryStock",
        back_populates="product",
        uselist=False,
        lazy="joined",
        cascade="all, delete-orphan",
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None

    @property
    def stock(self) -> int:
        return int(self.stock_row.quantity) if self.stock_row else 0

    @property
    def margin(self) -> Decimal:
        return quantize_currency(to_decimal(self.sale_price) - to_decimal(self.purchase_price))

    @property
    def margin_pct(self) -> Decimal:
        purchase = to_decimal(self.purchase_price)
        if not purchase:
            return Decimal("0.00")
        pct = (to_decimal(self.sale_price) - purchase) / purchase * 100
        return pct.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def needs_restock(self) -> bool:
        return self.stock < (self.min_stock or 0)

    @property
    def inventory_value(self) -> Decimal:
        return quantize_currency(to_decimal(self.purchase_price) * self.stock)


class InventoryStock(Base):
    __tablename__ = "inventory_stock"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, unique=True)
    quantity = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False)

    product = relationship("Product", back_populates="stock_row")


__all__ = ["Product", "InventoryStock"]
