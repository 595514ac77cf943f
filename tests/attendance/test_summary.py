from datetime import date, datetime, timedelta

from src.worktime.worktime.attendance.model import AttendanceRecord
from src.worktime.worktime.attendance.summary import build_summary
from src.worktime.worktime.core.enums import AttendanceStatus


def _record(day: date, status: AttendanceStatus, hours: float = 8.0, overtime: float = 0.0) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=f"r-{day.isoformat()}",
        employee_id="emp-1",
        work_date=day,
        status=status,
        punch_in_time=datetime.combine(day, datetime.min.time()).replace(hour=9),
        total_working_hours=hours,
        overtime_hours=overtime,
    )


MONDAY = date(2025, 1, 6)
FRIDAY = date(2025, 1, 10)


def test_summary_over_one_week():
    statuses = [
        AttendanceStatus.PRESENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.PRESENT,
        AttendanceStatus.ABSENT,
    ]
    records = [_record(MONDAY + timedelta(days=i), st, hours=0.0 if st == AttendanceStatus.ABSENT else 8.0) for i, st in enumerate(statuses)]

    summary = build_summary(employee_id="emp-1", start_date=MONDAY, end_date=FRIDAY, records=records, total_working_days=5)

    assert summary.present_days == 4
    assert summary.absent_days == 1
    assert summary.late_days == 1
    assert summary.punctuality_score == 75
    assert summary.attendance_rate == 80
    assert summary.total_working_hours == 32.0
    assert summary.average_working_hours == 6.4


def test_empty_range_is_zero_not_error():
    summary = build_summary(employee_id="emp-1", start_date=MONDAY, end_date=FRIDAY, records=[], total_working_days=0)

    assert summary.punctuality_score == 0
    assert summary.attendance_rate == 0
    assert summary.average_working_hours == 0


def test_rates_stay_within_bounds_when_present_exceeds_working_days():
    # Weekend work can push present days above scheduled days.
    records = [_record(MONDAY + timedelta(days=i), AttendanceStatus.LATE) for i in range(7)]

    summary = build_summary(employee_id="emp-1", start_date=MONDAY, end_date=MONDAY + timedelta(days=6), records=records, total_working_days=5)

    assert summary.attendance_rate == 100
    assert summary.punctuality_score == 0


def test_records_outside_range_are_ignored():
    records = [_record(MONDAY, AttendanceStatus.PRESENT), _record(MONDAY - timedelta(days=7), AttendanceStatus.LATE)]

    summary = build_summary(employee_id="emp-1", start_date=MONDAY, end_date=FRIDAY, records=records, total_working_days=5)

    assert summary.present_days == 1
    assert summary.late_days == 0


def test_half_days_and_overtime_are_counted():
    records = [
        _record(MONDAY, AttendanceStatus.HALF_DAY, hours=3.0),
        _record(MONDAY + timedelta(days=1), AttendanceStatus.PRESENT, hours=9.5, overtime=1.5),
    ]

    summary = build_summary(employee_id="emp-1", start_date=MONDAY, end_date=FRIDAY, records=records, total_working_days=5)

    assert summary.half_days == 1
    assert summary.present_days == 1
    assert summary.total_overtime_hours == 1.5
    assert summary.attendance_rate == 20


def test_service_summary_counts_working_days_from_settings(make_services):
    s = make_services()
    for i, st in enumerate([AttendanceStatus.PRESENT] * 3 + [AttendanceStatus.LATE]):
        s.records.add(_record(MONDAY + timedelta(days=i), st))

    # Mon 6th .. Sun 12th: five working days with the default Mon-Fri schedule
    summary = s.attendance.get_attendance_summary("emp-1", start_date=MONDAY, end_date=date(2025, 1, 12))

    assert summary.total_working_days == 5
    assert summary.present_days == 4
    assert summary.attendance_rate == 80
    assert summary.punctuality_score == 75
