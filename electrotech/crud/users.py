"""User accounts and the login audit log."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..core.permissions import UserLevel
from ..models.user import User, UserAction, UserLogEntry

USER_FIELDS = ("username", "password_hash", "level", "full_name", "email", "active")


def list_users(db: Session) -> list[User]:
    return db.execute(select(User).order_by(User.username)).scalars().all()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    stmt = select(User).where(func.lower(User.username) == username.strip().lower())
    return db.execute(stmt).scalars().first()


def username_taken(db: Session, username: str, exclude_id: int | None = None) -> bool:
    stmt = select(func.count(User.id)).where(func.lower(User.username) == username.strip().lower())
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return bool(db.execute(stmt).scalar())


def count_active_admins(db: Session, exclude_id: int | None = None) -> int:
    stmt = select(func.count(User.id)).where(User.level == int(UserLevel.ADMIN), User.active.is_(True))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return int(db.execute(stmt).scalar() or 0)


def admin_exists(db: Session) -> bool:
    return count_active_admins(db) > 0


def build_user(db: Session, data: dict) -> User:
    """Stage a new user on the session without committing."""

    if username_taken(db, data["username"]):
        raise ConflictError(f"Username '{data['username']}' is already taken")
    user = User(**{key: data[key] for key in USER_FIELDS if key in data})
    user.created_at = datetime.now()
    db.add(user)
    db.flush()
    return user


def create_user(db: Session, data: dict) -> User:
    try:
        user = build_user(db, data)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user


def apply_user_changes(db: Session, user: User, data: dict) -> User:
    if "username" in data and username_taken(db, data["username"], exclude_id=user.id):
        raise ConflictError(f"Username '{data['username']}' is already taken")
    for key in USER_FIELDS:
        if key in data:
            setattr(user, key, data[key])
    return user


def update_user(db: Session, user: User, data: dict) -> User:
    apply_user_changes(db, user, data)
    db.commit()
    db.refresh(user)
    return user


def log_action(db: Session, user: User, action: UserAction, ip_address: str | None = None) -> UserLogEntry:
    entry = UserLogEntry(
        user_id=user.id,
        action=action.value,
        occurred_at=datetime.now(),
        ip_address=(ip_address or None),
    )
    db.add(entry)
    return entry


def record_login(db: Session, user: User, ip_address: str | None = None) -> User:
    log_action(db, user, UserAction.ENTRY, ip_address)
    user.last_login_at = datetime.now()
    db.commit()
    db.refresh(user)
    return user


def record_logout(db: Session, user: User, ip_address: str | None = None) -> UserLogEntry:
    entry = log_action(db, user, UserAction.EXIT, ip_address)
    db.commit()
    db.refresh(entry)
    return entry


def list_audit_log(db: Session, start: date | None = None, end: date | None = None) -> list[UserLogEntry]:
    """Audit rows newest first. ``end`` covers the whole day."""

    stmt = select(UserLogEntry)
    if start is not None:
        stmt = stmt.where(UserLogEntry.occurred_at >= datetime.combine(start, time.min))
    if end is not None:
        stmt = stmt.where(UserLogEntry.occurred_at < datetime.combine(end + timedelta(days=1), time.min))
    stmt = stmt.order_by(desc(UserLogEntry.occurred_at), desc(UserLogEntry.id))
    return db.execute(stmt).scalars().all()
