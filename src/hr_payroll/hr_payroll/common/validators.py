from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .money import to_decimal


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_non_negative(value: Any, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not valid")
    if ident <= 0:
        raise ValidationError(f"{field_name} is not valid")
    return ident


def require_date_range(start: date, end: Optional[date], field_name: str = "date range") -> None:
    if end is not None and end < start:
        raise ValidationError(f"Invalid {field_name}: end is before start")
