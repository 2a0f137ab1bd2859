"""SQLAlchemy model for product categories."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from ..db.session import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    products = relationship("Product", back_populates="category")


__all__ = ["Category"]
