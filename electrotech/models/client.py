from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from ..db.session import Base


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("document_type", "document_number", name="uq_client_document"),)

    id = Column(Integer, primary_key=True, index=True)
    document_type = Column(String(3), nullable=False)
    document_number = Column(String(20), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    address = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    registered_at = Column(DateTime, nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def document(self) -> str:
        return f"{self.document_type} {self.document_number}".strip()


__all__ = ["Client"]
