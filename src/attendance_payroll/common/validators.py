from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_negative(value: Decimal, field_name: str) -> Decimal:
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return value


def require_date_range(start: date, end: date, *, start_name: str = "start", end_name: str = "end") -> None:
    if end < start:
        raise ValidationError(f"{end_name} ({end}) is before {start_name} ({start})")


def to_decimal(value: Any) -> Decimal:
    """Convert settings/DB numbers to Decimal without going through binary floats."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid number {value!r}") from None


def optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {field_name} required") from None
