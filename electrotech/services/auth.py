"""Login, logout, passwords and user administration."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import AuthenticationError, ConflictError, ValidationFailed
from ..core.permissions import UserLevel
from ..core.security import REFRESH, TokenPair, decode_token, hash_password, issue_token_pair, verify_password
from ..crud import users as repo
from ..models.user import User
from . import fields

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _level(value) -> int:
    try:
        return int(UserLevel(int(value)))
    except (TypeError, ValueError) as exc:
        raise ValidationFailed("level must be 1 (admin), 2 (parametric) or 3 (sporadic)") from exc


def _check_password(password: str | None) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def authenticate(db: Session, username: str, password: str, ip_address: str | None = None) -> User:
    """Verify credentials and record the login.

    A user whose previous login is older than the inactivity window is locked
    instead of being let in.
    """

    user = repo.get_user_by_username(db, username or "")
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for username %r", username)
        raise AuthenticationError("Invalid username or password")
    if not user.active:
        logger.warning("Login attempt by inactive user %s", user.username)
        raise AuthenticationError("User account is inactive")
    cutoff = datetime.now() - timedelta(days=settings.INACTIVITY_LOCK_DAYS)
    if user.last_login_at is not None and user.last_login_at < cutoff:
        repo.update_user(db, user, {"active": False})
        logger.warning("User %s locked after %s days without login", user.username, settings.INACTIVITY_LOCK_DAYS)
        raise AuthenticationError("User account was locked for inactivity")
    user = repo.record_login(db, user, ip_address)
    logger.info("User %s logged in", user.username)
    return user


def logout(db: Session, user: User, ip_address: str | None = None) -> None:
    repo.record_logout(db, user, ip_address)
    logger.info("User %s logged out", user.username)


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise ValidationFailed("Current password is incorrect", details={"field": "current_password"})
    _check_password(new_password)
    if new_password == current_password:
        raise ValidationFailed("The new password must differ from the current one")
    user = repo.update_user(db, user, {"password_hash": hash_password(new_password)})
    logger.info("Password changed for %s", user.username)
    return user


def _guard_admin_uniqueness(db: Session, level: int, active: bool, exclude_id: int | None = None) -> None:
    if level == UserLevel.ADMIN and active and repo.count_active_admins(db, exclude_id=exclude_id):
        raise ConflictError("An active administrator already exists")


def prepare_user(db: Session, payload: dict) -> dict:
    """Validate a new-user payload and return the values to persist."""

    username = fields.text(payload, "username", required=True, max_length=50)
    password = _check_password(payload.get("password"))
    level = _level(payload.get("level", UserLevel.SPORADIC))
    active = bool(payload.get("active", True))
    _guard_admin_uniqueness(db, level, active)
    return {
        "username": username,
        "password_hash": hash_password(password),
        "level": level,
        "full_name": fields.text(payload, "full_name", max_length=100) or username,
        "email": fields.email(payload),
        "active": active,
    }


def create_user(db: Session, payload: dict) -> User:
    user = repo.create_user(db, prepare_user(db, payload))
    logger.info("User created: %s (level %s)", user.username, user.level)
    return user


def prepare_user_changes(db: Session, user: User, payload: dict) -> dict:
    data: dict = {}
    if "username" in payload:
        data["username"] = fields.text(payload, "username", required=True, max_length=50)
    if "full_name" in payload:
        data["full_name"] = fields.text(payload, "full_name", required=True, max_length=100)
    if "email" in payload:
        data["email"] = fields.email(payload)
    if payload.get("password"):
        data["password_hash"] = hash_password(_check_password(payload["password"]))
    level = _level(payload["level"]) if payload.get("level") is not None else user.level
    active = bool(payload["active"]) if payload.get("active") is not None else bool(user.active)
    if level != user.level:
        data["level"] = level
    if active != bool(user.active):
        data["active"] = active

    was_admin = user.level == UserLevel.ADMIN and user.active
    stays_admin = level == UserLevel.ADMIN and active
    if was_admin and not stays_admin and not repo.count_active_admins(db, exclude_id=user.id):
        raise ConflictError("The only active administrator cannot be demoted or deactivated")
    if stays_admin and not was_admin:
        _guard_admin_uniqueness(db, level, active, exclude_id=user.id)
    return data


def update_user(db: Session, user: User, payload: dict) -> User:
    user = repo.update_user(db, user, prepare_user_changes(db, user, payload))
    logger.info("User updated: %s", user.username)
    return user


def token_scope(user: User) -> str:
    return f"level:{int(user.level)}"


def issue_tokens(user: User) -> TokenPair:
    return issue_token_pair(user.id, scope=token_scope(user))


def refresh_tokens(db: Session, refresh_token: str) -> TokenPair:
    """Issue a fresh pair, re-reading the user so a deactivation takes effect."""

    payload = decode_token(refresh_token, expected_type=REFRESH)
    user = repo.get_user(db, payload.user_id)
    if user is None or not user.active:
        raise AuthenticationError("User account is inactive")
    return issue_tokens(user)
