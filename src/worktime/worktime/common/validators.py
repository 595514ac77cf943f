from __future__ import annotations

from typing import Iterable

from ..core.exceptions import ValidationError
from .datetime_utils import parse_hhmm


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_non_negative(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def require_hhmm(value: str, field_name: str) -> str:
    try:
        parse_hhmm(value)
    except ValidationError:
        raise ValidationError(f"{field_name} must be HH:MM")
    return value.strip()


def require_weekdays(values: Iterable[int], field_name: str) -> tuple[int, ...]:
    try:
        days = tuple(sorted({int(v) for v in values}))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be weekday numbers 0-6")
    if any(d < 0 or d > 6 for d in days):
        raise ValidationError(f"{field_name} must be weekday numbers 0-6")
    return days


def require_fraction(value, field_name: str) -> float:
    number = require_non_negative(value, field_name)
    if number > 1:
        raise ValidationError(f"{field_name} must be between 0 and 1")
    return number
