"""Sales, their lines and the commission each completed sale earns."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class SaleStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    VOIDED = "voided"


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(20), nullable=False, unique=True, index=True)
    sold_at = Column(DateTime, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    payment_method_id = Column(Integer, ForeignKey("payment_methods.id"), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(12), nullable=False, default=SaleStatus.COMPLETED.value)

    client = relationship("Client", lazy="joined")
    employee = relationship("Employee", lazy="joined")
    payment_method = relationship("PaymentMethod", lazy="joined")
    lines = relationship(
        "SaleLine",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleLine.id",
    )
    commission = relationship("Commission", back_populates="sale", uselist=False, cascade="all, delete-orphan")

    @property
    def client_name(self) -> str | None:
        return self.client.full_name if self.client else None

    @property
    def employee_name(self) -> str | None:
        return self.employee.full_name if self.employee else None

    @property
    def payment_method_name(self) -> str | None:
        return self.payment_method.name if self.payment_method else None


class SaleLine(Base):
    __tablename__ = "sale_lines"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False)

    sale = relationship("Sale", back_populates="lines")
    product = relationship("Product", lazy="joined")

    @property
    def product_code(self) -> str | None:
        return self.product.code if self.product else None

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product else None


class Commission(Base):
    __tablename__ = "commissions"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, unique=True)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, nullable=False)

    sale = relationship("Sale", back_populates="commission")


__all__ = ["Commission", "Sale", "SaleLine", "SaleStatus"]
