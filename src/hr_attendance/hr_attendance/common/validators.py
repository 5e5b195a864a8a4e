from __future__ import annotations

from typing import Iterable

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_range(value: int, field_name: str, low: int, high: int) -> int:
    if value is None or not low <= int(value) <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return int(value)


def require_weekdays(values: Iterable[int], field_name: str = "work_days") -> tuple[int, ...]:
    days = tuple(sorted({require_range(v, field_name, 0, 6) for v in values}))
    return days
