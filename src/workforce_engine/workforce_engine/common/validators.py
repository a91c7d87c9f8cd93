from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_non_negative(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def require_ordered(start: Optional[date], end: Optional[date], *, start_name: str, end_name: str) -> None:
    if start is not None and end is not None and end < start:
        raise ValidationError(f"{end_name} must be on or after {start_name}")
