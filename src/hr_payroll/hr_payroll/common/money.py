from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from ..core.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """Coerce DB/JSON values (str, int, Decimal, float) into Decimal."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their printed value instead of binary noise
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} is not a valid number")


def money(value: Decimal) -> Decimal:
    """The single rounding point: 2 dp, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(base: Decimal, rate: Decimal) -> Decimal:
    return base * rate / HUNDRED


def total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)
