from datetime import date, datetime

from src.worktime.worktime.attendance.model import AttendanceRecord
from src.worktime.worktime.attendance.presentation import present_status, to_history_row
from src.worktime.worktime.core.enums import AttendanceStatus


def test_every_status_has_a_presentation():
    for status in AttendanceStatus:
        p = present_status(status)
        assert p.label != "Unknown"
        assert p.css_class.startswith("bg-")


def test_server_spelling_and_unknown_values():
    assert present_status("half-day").label == "Half Day"
    assert present_status("LATE").label == "Late"
    assert present_status("vacation").label == "Unknown"
    assert present_status(None).label == "Unknown"


def test_history_row_formats_times():
    record = AttendanceRecord(
        record_id="r1",
        employee_id="emp-1",
        work_date=date(2023, 12, 25),
        status=AttendanceStatus.LATE,
        punch_in_time=datetime(2023, 12, 25, 9, 20),
        punch_out_time=datetime(2023, 12, 25, 17, 45),
        total_working_hours=7.42,
        total_break_time=45,
    )

    row = to_history_row(record)

    assert row["date"] == "12/25/2023"
    assert row["punch_in"] == "9:20 AM"
    assert row["punch_out"] == "5:45 PM"
    assert row["break_time"] == "45m"
    assert row["status"] == "Late"
    assert row["css_class"] == "bg-warning text-dark"
