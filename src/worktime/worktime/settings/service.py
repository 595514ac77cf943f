from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict

from ..common.validators import require_fraction, require_hhmm, require_non_empty, require_non_negative, require_weekdays
from ..core.enums import SyncAction
from ..core.exceptions import DataAccessError, ValidationError
from ..sync.dispatcher import ActionDispatcher
from .mapping import parse_working_days, settings_to_json
from .model import AttendanceSettings
from .repository import SettingsRepository

log = logging.getLogger(__name__)


class SettingsService:
    """Read-mostly access to AttendanceSettings.

    Settings are fetched once per employee and cached. When the server has
    none (or cannot be reached before anything was cached) the defaults
    apply, so tracking keeps working offline.
    """

    def __init__(self, settings: SettingsRepository, dispatcher: ActionDispatcher, *, defaults: AttendanceSettings | None = None):
        self._settings = settings
        self._dispatcher = dispatcher
        self._defaults = defaults or AttendanceSettings()
        self._cache: Dict[str, AttendanceSettings] = {}
        self._lock = threading.Lock()

    def get_settings(self, employee_id: str) -> AttendanceSettings:
        with self._lock:
            cached = self._cache.get(employee_id)
        if cached:
            return cached

        try:
            loaded = self._settings.get_for_employee(employee_id)
        except DataAccessError as e:
            log.warning("Could not load attendance settings for %s, using defaults: %s", employee_id, e)
            return self._defaults

        settings = loaded or self._defaults
        with self._lock:
            self._cache[employee_id] = settings
        return settings

    def refresh(self, employee_id: str) -> AttendanceSettings:
        with self._lock:
            self._cache.pop(employee_id, None)
        return self.get_settings(employee_id)

    def update_settings(self, employee_id: str, *, now: datetime | None = None, **changes: Any) -> AttendanceSettings:
        """Admin flow: validate, push to the server (or queue), then cache."""

        employee_id = require_non_empty(employee_id, "employee_id")
        current = self.get_settings(employee_id)
        unknown = set(changes) - set(AttendanceSettings.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        cleaned = dict(changes)
        for name in ("work_start_time", "work_end_time"):
            if name in cleaned:
                cleaned[name] = require_hhmm(cleaned[name], name)
        for name in ("break_duration", "late_threshold", "early_leave_threshold"):
            if name in cleaned:
                cleaned[name] = int(require_non_negative(cleaned[name], name))
        if "overtime_threshold" in cleaned:
            cleaned["overtime_threshold"] = require_non_negative(cleaned["overtime_threshold"], "overtime_threshold")
        if "working_days" in cleaned:
            try:
                days = parse_working_days(cleaned["working_days"])
            except (KeyError, TypeError, ValueError):
                raise ValidationError("working_days must be weekday numbers 0-6")
            cleaned["working_days"] = require_weekdays(days, "working_days")
        if "half_day_fraction" in cleaned:
            cleaned["half_day_fraction"] = require_fraction(cleaned["half_day_fraction"], "half_day_fraction")

        updated = replace(current, **cleaned)
        if updated.start >= updated.end:
            raise ValidationError("work_end_time must be after work_start_time")

        payload = {"employeeId": employee_id, **settings_to_json(updated)}
        self._dispatcher.submit(SyncAction.SETTINGS_UPDATE, payload, now=now)

        with self._lock:
            self._cache[employee_id] = updated
        log.info("Attendance settings updated for %s", employee_id)
        return updated
