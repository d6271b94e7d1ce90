from __future__ import annotations

from datetime import time

from ..core.exceptions import InvalidTimeRange, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_time_range(start: time, end: time) -> None:
    if start >= end:
        raise InvalidTimeRange("End time must be after start time")


def require_non_negative(value: int, field_name: str) -> int:
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return value
