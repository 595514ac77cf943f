from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse an "HH:MM" settings value into a time."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def js_weekday(day: date) -> int:
    """Weekday index with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def is_working_day(day: date, working_days: Iterable[int]) -> bool:
    return js_weekday(day) in set(working_days)


def count_working_days(start: date, end: date, working_days: Iterable[int]) -> int:
    """Number of working days in the inclusive range [start, end]."""
    days = set(working_days)
    if end < start or not days:
        return 0
    count = 0
    current = start
    while current <= end:
        if js_weekday(current) in days:
            count += 1
        current += timedelta(days=1)
    return count


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Floor of (end - start) in minutes, never negative."""
    return max(0, int((end - start).total_seconds() // 60))


def parse_iso_datetime(value) -> datetime | None:
    """Parse a server timestamp into a naive local datetime.

    Offset-aware values (e.g. "...Z") are converted to local time so they
    compare cleanly against `now_local()`.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def to_iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value else None
