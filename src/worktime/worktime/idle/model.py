from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import whole_minutes_between
from ..core import constants
from ..core.enums import IdleReason


@dataclass(frozen=True)
class IdleSettings:
    enabled: bool = True
    idle_threshold_minutes: float = constants.DEFAULT_IDLE_THRESHOLD_MINUTES
    pause_timer_on_idle: bool = True
    show_idle_warning: bool = True
    warning_time_minutes: float = constants.DEFAULT_IDLE_WARNING_MINUTES
    auto_resume_on_activity: bool = True


@dataclass(frozen=True)
class IdleSession:
    session_id: str
    employee_id: str
    start_time: datetime
    reason: IdleReason
    end_time: Optional[datetime] = None
    notes: Optional[str] = None

    def duration_minutes(self, now: datetime | None = None) -> int:
        end = self.end_time or now
        if end is None:
            return 0
        return whole_minutes_between(self.start_time, end)


@dataclass(frozen=True)
class IdleWarning:
    employee_id: str
    idle_at: datetime
    seconds_remaining: int


@dataclass(frozen=True)
class IdleState:
    is_idle: bool
    is_monitoring: bool
    total_idle_time: int
    settings: IdleSettings
    current_idle_session: Optional[IdleSession] = None
    last_activity_time: Optional[datetime] = None
    warning_active: bool = False
    employee_id: Optional[str] = None
