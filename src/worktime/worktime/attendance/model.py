from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, PunchType, TrackingState


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    address: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee's attendance for one calendar day."""

    record_id: str
    employee_id: str
    work_date: date
    status: AttendanceStatus
    punch_in_time: Optional[datetime] = None
    punch_out_time: Optional[datetime] = None
    total_working_hours: float = 0.0
    total_break_time: int = 0
    total_idle_time: int = 0
    late_minutes: Optional[int] = None
    early_leave_minutes: Optional[int] = None
    overtime_hours: Optional[float] = None
    notes: Optional[str] = None
    break_started_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.punch_in_time is not None and self.punch_out_time is None

    @property
    def tracking_state(self) -> TrackingState:
        if self.punch_in_time is None:
            return TrackingState.NOT_STARTED
        if self.punch_out_time is not None:
            return TrackingState.PUNCHED_OUT
        if self.break_started_at is not None:
            return TrackingState.ON_BREAK
        return TrackingState.PUNCHED_IN


@dataclass(frozen=True)
class PunchRecord:
    punch_id: str
    employee_id: str
    record_id: str
    punch_type: PunchType
    punch_time: datetime
    device_info: str
    is_manual: bool = False
    location: Optional[Location] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class BreakSession:
    session_id: str
    record_id: str
    employee_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None


@dataclass(frozen=True)
class PunchResult:
    record: AttendanceRecord
    punch: PunchRecord
    is_late: bool = False
    queued: bool = False


@dataclass(frozen=True)
class TrackingTransition:
    """Published after a punch/break action changed an employee's state."""

    employee_id: str
    state: TrackingState
    at: datetime


@dataclass(frozen=True)
class AttendanceSummary:
    """Derived over a date range; never stored."""

    employee_id: str
    start_date: date
    end_date: date
    total_working_days: int
    present_days: int
    absent_days: int
    late_days: int
    half_days: int
    total_working_hours: float
    total_overtime_hours: float
    average_working_hours: float
    punctuality_score: int
    attendance_rate: float
