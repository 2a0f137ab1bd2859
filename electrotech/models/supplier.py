from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, String

from ..db.session import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    contact_name = Column(String(100), nullable=True)
    payment_terms = Column(String(100), nullable=True)
    active = Column(Boolean, nullable=False, default=True)


__all__ = ["Supplier"]
