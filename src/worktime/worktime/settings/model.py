from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Tuple

from ..common.datetime_utils import parse_hhmm
from ..core import constants


@dataclass(frozen=True)
class AttendanceSettings:
    """Per-employee work rules. Read-only for the tracking engine."""

    work_start_time: str = constants.DEFAULT_WORK_START_TIME
    work_end_time: str = constants.DEFAULT_WORK_END_TIME
    break_duration: int = constants.DEFAULT_BREAK_DURATION_MINUTES
    late_threshold: int = constants.DEFAULT_LATE_THRESHOLD_MINUTES
    early_leave_threshold: int = constants.DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES
    overtime_threshold: float = constants.DEFAULT_OVERTIME_THRESHOLD_HOURS
    working_days: Tuple[int, ...] = constants.DEFAULT_WORKING_DAYS
    timezone: str = constants.DEFAULT_TIMEZONE
    require_location: bool = False
    allow_remote_work: bool = True
    auto_punch_out: bool = False
    half_day_fraction: float = constants.DEFAULT_HALF_DAY_FRACTION

    @property
    def start(self) -> time:
        return parse_hhmm(self.work_start_time)

    @property
    def end(self) -> time:
        return parse_hhmm(self.work_end_time)

    @property
    def standard_hours(self) -> float:
        """Scheduled hours of a full day, break excluded."""

        start = self.start
        end = self.end
        minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute) - self.break_duration
        return max(0, minutes) / 60
