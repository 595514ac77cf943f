from __future__ import annotations

import math
from datetime import date
from typing import Iterable

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceSummary


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def build_summary(
    *,
    employee_id: str,
    start_date: date,
    end_date: date,
    records: Iterable[AttendanceRecord],
    total_working_days: int,
) -> AttendanceSummary:
    """Aggregate records in [start_date, end_date].

    present_days counts late days too (a late day is still a day present).
    Both percentages are 0 on an empty range instead of dividing by zero.
    """

    in_range = [r for r in records if start_date <= r.work_date <= end_date]

    late_days = sum(1 for r in in_range if r.status == AttendanceStatus.LATE)
    present_days = late_days + sum(1 for r in in_range if r.status == AttendanceStatus.PRESENT)
    absent_days = sum(1 for r in in_range if r.status == AttendanceStatus.ABSENT)
    half_days = sum(1 for r in in_range if r.status == AttendanceStatus.HALF_DAY)

    total_hours = sum(r.total_working_hours or 0 for r in in_range)
    total_overtime = sum(r.overtime_hours or 0 for r in in_range)
    average_hours = total_hours / len(in_range) if in_range else 0.0

    punctuality = 0
    if present_days > 0:
        punctuality = max(0, min(100, _round_half_up(100 * (present_days - late_days) / present_days)))

    attendance_rate = 0.0
    if total_working_days > 0:
        attendance_rate = round(_clamp_percent(100 * present_days / total_working_days), 2)

    return AttendanceSummary(
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        total_working_days=total_working_days,
        present_days=present_days,
        absent_days=absent_days,
        late_days=late_days,
        half_days=half_days,
        total_working_hours=round(total_hours, 2),
        total_overtime_hours=round(total_overtime, 2),
        average_working_hours=round(average_hours, 2),
        punctuality_score=punctuality,
        attendance_rate=attendance_rate,
    )
