from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..deps.auth import get_current_user
from ..models.user import User
from ..schemas.auth import PasswordChange, RefreshRequest, TokenRequest, TokenResponse, UserOut
from ..services import auth as auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/token", response_model=TokenResponse, summary="Exchange credentials for JWTs")
def api_issue_token(payload: TokenRequest, request: Request, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, payload.username, payload.password, _client_ip(request))
    pair = auth_service.issue_tokens(user)
    return TokenResponse(**pair.model_dump())


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def api_refresh_token(payload: RefreshRequest, db: Session = Depends(get_db)):
    pair = auth_service.refresh_tokens(db, payload.refresh_token)
    return TokenResponse(**pair.model_dump())


@router.post("/logout")
def api_logout(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    auth_service.logout(db, user, _client_ip(request))
    return {"status": "logged_out"}


@router.post("/password")
def api_change_password(
    payload: PasswordChange,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, user, payload.current_password, payload.new_password)
    return {"status": "password_changed"}


@router.get("/me", response_model=UserOut)
def api_me(user: User = Depends(get_current_user)):
    return user
