"""Display formatting for durations and timestamps.

Every function is pure and never raises on bad input: unusable values
(None, NaN, negative durations, unparsable strings) format as a
placeholder instead.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Union

from ..core.constants import DURATION_PLACEHOLDER

DateLike = Union[datetime, date, str]


def _as_minutes(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return int(number)


def _as_datetime(value: DateLike) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def format_duration(minutes) -> str:
    """2h 30m, or 45m under one hour."""
    total = _as_minutes(minutes)
    if total is None:
        return DURATION_PLACEHOLDER
    hours, mins = divmod(total, 60)
    if hours == 0:
        return f"{mins}m"
    return f"{hours}h {mins}m"


def format_duration_hhmm(minutes) -> str:
    total = _as_minutes(minutes)
    if total is None:
        return DURATION_PLACEHOLDER
    hours, mins = divmod(total, 60)
    return f"{hours:02d}:{mins:02d}"


def format_hours(hours) -> str:
    """Float hours (as stored on attendance records) as a duration."""
    if hours is None or isinstance(hours, bool):
        return DURATION_PLACEHOLDER
    try:
        return format_duration(round(float(hours) * 60))
    except (TypeError, ValueError, OverflowError):
        return DURATION_PLACEHOLDER


def format_time(value: DateLike, *, with_seconds: bool = False) -> str:
    """12-hour clock, e.g. 2:30 PM."""
    dt = _as_datetime(value)
    if dt is None:
        return DURATION_PLACEHOLDER
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    if with_seconds:
        return f"{hour}:{dt.minute:02d}:{dt.second:02d} {suffix}"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_time_with_seconds(value: DateLike) -> str:
    return format_time(value, with_seconds=True)


def format_date(value: DateLike) -> str:
    """US style date, e.g. 12/25/2023."""
    dt = _as_datetime(value)
    if dt is None:
        return DURATION_PLACEHOLDER
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_datetime(value: DateLike) -> str:
    dt = _as_datetime(value)
    if dt is None:
        return DURATION_PLACEHOLDER
    return f"{format_date(dt)}, {format_time(dt)}"


def format_duration_between(start: DateLike, end: Optional[DateLike] = None, *, hhmm: bool = False) -> str:
    start_dt = _as_datetime(start)
    end_dt = _as_datetime(end) if end is not None else datetime.now(start_dt.tzinfo if start_dt else None)
    if start_dt is None or end_dt is None:
        return DURATION_PLACEHOLDER
    try:
        minutes = (end_dt - start_dt).total_seconds() // 60
    except TypeError:
        # naive vs aware
        return DURATION_PLACEHOLDER
    if hhmm:
        return format_duration_hhmm(minutes)
    return format_duration(minutes)
