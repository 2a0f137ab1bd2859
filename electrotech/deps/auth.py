from __future__ import annotations

from fastapi import Depends, Header, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from ..core.errors import AuthenticationError, PermissionDenied
from ..core.permissions import Module, can_write, has_permission
from ..core.security import decode_token
from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..models.user import User


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> User:
    scheme, credentials = get_authorization_scheme_param(authorization or "")
    if scheme.lower() != "bearer" or not credentials:
        raise AuthenticationError("Authorization required")
    payload = decode_token(credentials)
    user = get_user(db, payload.user_id)
    if user is None or not user.active:
        raise AuthenticationError("User account is inactive")
    _set_principal(request, f"user:{user.username}")
    request.state.token_payload = payload
    return user


def require_module(module: Module):
    """Dependency factory: the caller's level must open ``module``."""

    def _check(user: User = Depends(get_current_user)) -> User:
        if not has_permission(user, module):
            raise PermissionDenied(f"Your access level does not allow the {module.value} module")
        return user

    return _check


def require_write(user: User = Depends(get_current_user)) -> User:
    if not can_write(user):
        raise PermissionDenied("Your access level is read-only")
    return user
