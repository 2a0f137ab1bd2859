from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ElectroTechError(Exception):
    """Base class for every error raised by the business layer."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(ElectroTechError, ValueError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "business_rule_violation"


class ConflictError(ValidationFailed):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class NotFoundError(ElectroTechError, LookupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class AuthenticationError(ElectroTechError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"


class PermissionDenied(ElectroTechError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


def integrity_message(exc: IntegrityError) -> str:
    """Turn a driver integrity error into something a cashier can read."""

    raw = str(getattr(exc, "orig", exc)).upper()
    if "FOREIGN KEY" in raw:
        return "The record cannot be changed because other records depend on it."
    if "UNIQUE" in raw or "DUPLICATE" in raw:
        return "A record with the same unique information already exists."
    if "CHECK" in raw:
        return "The value does not satisfy the configured restrictions."
    return "The database rejected the change."


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str):
        message = detail
    else:
        message = "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def domain_exception_handler(request: Request, exc: ElectroTechError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        headers=headers,
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s: %s", request.url.path, getattr(exc, "orig", exc))
    return ErrorEnvelope(
        status_code=status.HTTP_409_CONFLICT,
        code="integrity_error",
        message=integrity_message(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ElectroTechError, domain_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
