"""Password hashing and the access/refresh JWT pair handed to API clients."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from .config import settings
from .errors import AuthenticationError

ALGORITHM = "HS256"
AUDIENCE = "electrotech-backoffice"
ISSUER = "electrotech"
ACCESS = "access"
REFRESH = "refresh"


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenPayload(BaseModel):
    sub: str
    exp: datetime
    iat: datetime
    typ: str
    aud: str
    iss: str
    scope: str | None = None

    @property
    def user_id(self) -> int | None:
        return int(self.sub) if self.sub.isdigit() else None

    @property
    def level(self) -> int | None:
        """Access level carried in a ``level:<n>`` scope, if any."""

        for segment in (self.scope or "").split():
            name, _, value = segment.partition(":")
            if name == "level" and value.isdigit():
                return int(value)
        return None


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def _claims(user_id: int, token_type: str, lifetime: timedelta, scope: str | None) -> dict[str, Any]:
    issued = datetime.now(tz=timezone.utc)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "typ": token_type,
        "aud": AUDIENCE,
        "iss": ISSUER,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
    }
    if scope:
        claims["scope"] = scope
    return claims


def issue_token_pair(user_id: int, scope: str | None = None) -> TokenPair:
    access_ttl = timedelta(minutes=settings.JWT_ACCESS_TTL_MIN)
    refresh_ttl = timedelta(days=settings.JWT_REFRESH_TTL_DAYS)
    return TokenPair(
        access_token=jwt.encode(_claims(user_id, ACCESS, access_ttl, scope), settings.JWT_SECRET, algorithm=ALGORITHM),
        refresh_token=jwt.encode(
            _claims(user_id, REFRESH, refresh_ttl, scope), settings.JWT_SECRET, algorithm=ALGORITHM
        ),
        expires_in=int(access_ttl.total_seconds()),
    )


def decode_token(token: str, *, expected_type: str = ACCESS) -> TokenPayload:
    """Verify signature, audience and issuer; raise ``AuthenticationError`` otherwise."""

    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM], audience=AUDIENCE, issuer=ISSUER)
        payload = TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        raise AuthenticationError("Invalid or expired token") from exc
    if payload.typ != expected_type or payload.user_id is None:
        raise AuthenticationError(f"Expected an {expected_type} token")
    return payload
