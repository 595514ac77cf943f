from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceStatus
from ...settings.model import AttendanceSettings
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Worked time fell below the half-day share of standard hours."""

    def decide_punch_in(self, *, now: datetime, today: date, settings: AttendanceSettings) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_punch_out(self, *, worked_hours: float, settings: AttendanceSettings, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            note=f"Worked {worked_hours:.2f}h of {settings.standard_hours:.2f}h",
        )
