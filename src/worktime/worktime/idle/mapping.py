from __future__ import annotations

from typing import Any, Dict

from ..common.datetime_utils import to_iso
from .model import IdleSession, IdleSettings

_FIELDS = {
    "enabled": "enabled",
    "idleThresholdMinutes": "idle_threshold_minutes",
    "pauseTimerOnIdle": "pause_timer_on_idle",
    "showIdleWarning": "show_idle_warning",
    "warningTimeMinutes": "warning_time_minutes",
    "autoResumeOnActivity": "auto_resume_on_activity",
}


def idle_settings_from_json(data: Dict[str, Any]) -> IdleSettings:
    values = {attr: data[key] for key, attr in _FIELDS.items() if data.get(key) is not None}
    return IdleSettings(**values)


def idle_settings_to_json(settings: IdleSettings) -> Dict[str, Any]:
    return {key: getattr(settings, attr) for key, attr in _FIELDS.items()}


def idle_session_to_json(session: IdleSession) -> Dict[str, Any]:
    return {
        "id": session.session_id,
        "employeeId": session.employee_id,
        "startTime": to_iso(session.start_time),
        "endTime": to_iso(session.end_time),
        "duration": session.duration_minutes() if session.end_time else None,
        "reason": session.reason.value,
        "notes": session.notes,
    }


def idle_settings_changes_from_json(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_FIELDS.get(key, key): value for key, value in data.items() if key != "employeeId"}
