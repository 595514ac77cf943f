from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..common.time_format import format_date, format_duration, format_hours, format_time
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


@dataclass(frozen=True)
class StatusPresentation:
    label: str
    css_class: str
    icon: str


_PRESENTATION = {
    AttendanceStatus.PRESENT: StatusPresentation("Present", "bg-success", "check-circle"),
    AttendanceStatus.LATE: StatusPresentation("Late", "bg-warning text-dark", "clock"),
    AttendanceStatus.ABSENT: StatusPresentation("Absent", "bg-danger", "x-circle"),
    AttendanceStatus.HALF_DAY: StatusPresentation("Half Day", "bg-info text-dark", "adjust"),
    AttendanceStatus.ON_LEAVE: StatusPresentation("On Leave", "bg-secondary", "calendar"),
}

_UNKNOWN = StatusPresentation("Unknown", "bg-secondary", "help-circle")


def present_status(status: Union[AttendanceStatus, str, None]) -> StatusPresentation:
    """The one status -> label/colour/icon mapping used everywhere."""

    if status is None:
        return _UNKNOWN
    if not isinstance(status, AttendanceStatus):
        try:
            status = AttendanceStatus(str(status).strip().lower().replace("-", "_"))
        except ValueError:
            return _UNKNOWN
    return _PRESENTATION.get(status, _UNKNOWN)


def to_history_row(record: AttendanceRecord) -> dict:
    p = present_status(record.status)
    return {
        "date": format_date(record.work_date),
        "punch_in": format_time(record.punch_in_time) if record.punch_in_time else "-",
        "punch_out": format_time(record.punch_out_time) if record.punch_out_time else "-",
        "working_hours": format_hours(record.total_working_hours),
        "break_time": format_duration(record.total_break_time),
        "status": p.label,
        "css_class": p.css_class,
        "icon": p.icon,
    }
