from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Tuple

from .model import AttendanceSettings

log = logging.getLogger(__name__)

_DAY_NAMES = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

_FIELDS = {
    "workStartTime": "work_start_time",
    "workEndTime": "work_end_time",
    "breakDuration": "break_duration",
    "lateThreshold": "late_threshold",
    "earlyLeaveThreshold": "early_leave_threshold",
    "overtimeThreshold": "overtime_threshold",
    "workingDays": "working_days",
    "timezone": "timezone",
    "requireLocation": "require_location",
    "allowRemoteWork": "allow_remote_work",
    "autoPunchOut": "auto_punch_out",
    "halfDayFraction": "half_day_fraction",
}


def _weekday_index(value: Any) -> int:
    if isinstance(value, str) and not value.strip().isdigit():
        return _DAY_NAMES[value.strip().lower()]
    return int(value)


def parse_working_days(values: Iterable[Any]) -> Tuple[int, ...]:
    """Accept weekday indices (0 = Sunday) or day names ("monday")."""

    return tuple(sorted({_weekday_index(v) for v in values}))


def settings_from_json(data: Dict[str, Any]) -> AttendanceSettings:
    """Build settings from a server payload; missing keys keep defaults."""

    values: Dict[str, Any] = {}
    for key, attr in _FIELDS.items():
        if key in data and data[key] is not None:
            values[attr] = data[key]
    if "working_days" in values:
        try:
            values["working_days"] = parse_working_days(values["working_days"])
        except (KeyError, TypeError, ValueError):
            log.warning("Ignoring unreadable workingDays %r", data.get("workingDays"))
            del values["working_days"]
    return AttendanceSettings(**values)


def settings_to_json(settings: AttendanceSettings) -> Dict[str, Any]:
    data = {key: getattr(settings, attr) for key, attr in _FIELDS.items()}
    data["workingDays"] = list(settings.working_days)
    return data


def settings_changes_from_json(data: Dict[str, Any]) -> Dict[str, Any]:
    """Partial update body -> keyword changes; snake_case keys pass through."""

    return {_FIELDS.get(key, key): value for key, value in data.items() if key != "employeeId"}
