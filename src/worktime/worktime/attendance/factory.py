from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..settings.model import AttendanceSettings
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_punch_in(self, *, now: datetime, today: date, settings: AttendanceSettings) -> AttendanceStrategy:
        start = datetime.combine(today, settings.start)
        if now <= start + timedelta(minutes=settings.late_threshold):
            return NormalStrategy()
        return LateStrategy()

    def for_punch_out(self, *, worked_hours: float, settings: AttendanceSettings) -> AttendanceStrategy:
        if worked_hours < settings.half_day_fraction * settings.standard_hours:
            return HalfDayStrategy()
        return NormalStrategy()
