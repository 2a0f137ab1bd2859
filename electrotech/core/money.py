"""Decimal helpers shared by every module that touches prices or totals."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
# Tolerance used when comparing client-supplied amounts with recomputed ones.
TOLERANCE = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Best-effort conversion of incoming values to Decimal for currency math."""

    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return Decimal("0")
        cleaned = cleaned.replace("$", "").replace(",", "")
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
    return Decimal("0")


def quantize_currency(value: Any) -> Decimal:
    amount = to_decimal(value)
    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if amount else ZERO


def amounts_match(left: Any, right: Any) -> bool:
    return abs(to_decimal(left) - to_decimal(right)) <= TOLERANCE


def format_currency(value: Any) -> str:
    return f"${quantize_currency(value):,.2f}"
