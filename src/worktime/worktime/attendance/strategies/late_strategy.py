from __future__ import annotations

from datetime import date, datetime

from ...common.datetime_utils import whole_minutes_between
from ...core.enums import AttendanceStatus
from ...settings.model import AttendanceSettings
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Punch-in after start + late threshold. Minutes are counted from start."""

    def decide_punch_in(self, *, now: datetime, today: date, settings: AttendanceSettings) -> StatusDecision:
        start = datetime.combine(today, settings.start)
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=whole_minutes_between(start, now))

    def decide_punch_out(self, *, worked_hours: float, settings: AttendanceSettings, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
