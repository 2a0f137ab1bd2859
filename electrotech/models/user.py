"""Application users and their login/logout audit trail."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ..db.session import Base


class UserAction(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    level = Column(Integer, nullable=False)
    full_name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    employee = relationship("Employee", back_populates="user", uselist=False)


class UserLogEntry(Base):
    """One login or logout. ``ip_address`` fits IPv6 text form."""

    __tablename__ = "user_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(10), nullable=False)
    occurred_at = Column(DateTime, nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)

    user = relationship("User", lazy="joined")

    @property
    def username(self) -> str | None:
        return self.user.username if self.user else None

    @property
    def user_full_name(self) -> str | None:
        return self.user.full_name if self.user else None


__all__ = ["User", "UserAction", "UserLogEntry"]
