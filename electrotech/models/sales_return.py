from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ..db.session import Base


class ReturnStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    REJECTED = "rejected"


class SalesReturn(Base):
    """Customer return against a sale. Stock comes back only once processed."""

    __tablename__ = "sales_returns"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    returned_on = Column(Date, nullable=False)
    reason = Column(String(500), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(12), nullable=False, default=ReturnStatus.PENDING.value)
    processed_at = Column(DateTime, nullable=True)

    sale = relationship("Sale", lazy="joined")

    @property
    def credit_note_number(self) -> str:
        return f"NC{self.id:05d}" if self.id is not None else ""

    @property
    def invoice_number(self) -> str | None:
        return self.sale.invoice_number if self.sale else None


__all__ = ["ReturnStatus", "SalesReturn"]
