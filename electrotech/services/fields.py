"""Small payload-cleaning helpers used by the validation services."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from ..core.errors import ValidationFailed
from ..core.money import quantize_currency, to_decimal

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_MAX_LENGTH = 20


def text(
    data: dict,
    field: str,
    *,
    required: bool = False,
    max_length: int | None = None,
    label: str | None = None,
) -> str | None:
    label = label or field
    value = data.get(field)
    cleaned = str(value).strip() if value is not None else ""
    if not cleaned:
        if required:
            raise ValidationFailed(f"{label} is required", details={"field": field})
        return None
    if max_length is not None and len(cleaned) > max_length:
        raise ValidationFailed(
            f"{label} cannot exceed {max_length} characters",
            details={"field": field, "max_length": max_length},
        )
    return cleaned


def email(data: dict, field: str = "email") -> str | None:
    value = text(data, field, max_length=100)
    if value is not None and not EMAIL_RE.match(value):
        raise ValidationFailed(f"{value} is not a valid email address", details={"field": field})
    return value


def phone(data: dict, field: str = "phone", *, required: bool = False) -> str | None:
    return text(data, field, required=required, max_length=PHONE_MAX_LENGTH)


def positive_id(data: dict, field: str, *, label: str | None = None) -> int:
    value = data.get(field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0
    if number <= 0:
        raise ValidationFailed(f"{label or field} must be selected", details={"field": field})
    return number


def money(data: dict, field: str, *, positive: bool = False, default: Any = None) -> Decimal:
    value = data.get(field, default)
    amount = quantize_currency(to_decimal(value))
    if positive and amount <= 0:
        raise ValidationFailed(f"{field} must be greater than zero", details={"field": field})
    if amount < 0:
        raise ValidationFailed(f"{field} cannot be negative", details={"field": field})
    return amount


def as_date(value: Any, field: str, *, required: bool = True) -> date | None:
    if value is None or value == "":
        if required:
            raise ValidationFailed(f"{field} is required", details={"field": field})
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise ValidationFailed(f"{field} is not a valid date", details={"field": field}) from exc


def as_datetime(value: Any, field: str, *, default: datetime | None = None) -> datetime:
    if value is None or value == "":
        if default is None:
            raise ValidationFailed(f"{field} is required", details={"field": field})
        return default
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationFailed(f"{field} is not a valid date", details={"field": field}) from exc
    return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed


def merged(obj: Any, payload: dict, fields: tuple[str, ...]) -> dict:
    """Current attribute values overlaid with the incoming partial payload."""

    data = {field: getattr(obj, field) for field in fields}
    data.update({key: value for key, value in payload.items() if key in fields})
    return data
