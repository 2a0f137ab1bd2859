from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..db.session import Base


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (UniqueConstraint("document_type", "document_number", name="uq_employee_document"),)

    id = Column(Integer, primary_key=True, index=True)
    document_type = Column(String(3), nullable=False)
    document_number = Column(String(20), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    address = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=False)
    hired_on = Column(Date, nullable=False)
    base_salary = Column(Numeric(12, 2), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, unique=True)
    active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="employee", lazy="joined")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def username(self) -> str | None:
        return self.user.username if self.user else None


__all__ = ["Employee"]
