from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, String

from ..db.session import Base


class PaymentMethod(Base):
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    active = Column(Boolean, nullable=False, default=True)


__all__ = ["PaymentMethod"]
