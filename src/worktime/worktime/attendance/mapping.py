from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime, to_iso
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, BreakSession, Location, PunchRecord

log = logging.getLogger(__name__)


def parse_status(value: Any) -> AttendanceStatus:
    # Server side spells it "half-day".
    raw = str(value or "").strip().lower().replace("-", "_")
    try:
        return AttendanceStatus(raw)
    except ValueError:
        log.warning("Unknown attendance status %r, treating as absent", value)
        return AttendanceStatus.ABSENT


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def location_to_json(location: Optional[Location]) -> Optional[Dict[str, Any]]:
    if location is None:
        return None
    return {"latitude": location.latitude, "longitude": location.longitude, "address": location.address}


def record_from_json(data: Dict[str, Any]) -> AttendanceRecord:
    work_date = data.get("date") or data.get("workDate")
    return AttendanceRecord(
        record_id=str(data.get("id") or data.get("_id") or data.get("recordId")),
        employee_id=str(data["employeeId"]),
        work_date=parse_iso_date(str(work_date)[:10]),
        status=parse_status(data.get("status")),
        punch_in_time=parse_iso_datetime(data.get("punchInTime")),
        punch_out_time=parse_iso_datetime(data.get("punchOutTime")),
        total_working_hours=float(data.get("totalWorkingHours") or 0),
        total_break_time=int(data.get("totalBreakTime") or 0),
        total_idle_time=int(data.get("totalIdleTime") or 0),
        late_minutes=_optional_int(data.get("lateMinutes")),
        early_leave_minutes=_optional_int(data.get("earlyLeaveMinutes")),
        overtime_hours=_optional_float(data.get("overtimeHours")),
        notes=data.get("notes"),
        break_started_at=parse_iso_datetime(data.get("breakStartedAt")),
    )


def record_to_json(record: AttendanceRecord) -> Dict[str, Any]:
    return {
        "id": record.record_id,
        "employeeId": record.employee_id,
        "date": record.work_date.isoformat(),
        "status": record.status.value,
        "punchInTime": to_iso(record.punch_in_time),
        "punchOutTime": to_iso(record.punch_out_time),
        "totalWorkingHours": record.total_working_hours,
        "totalBreakTime": record.total_break_time,
        "totalIdleTime": record.total_idle_time,
        "lateMinutes": record.late_minutes,
        "earlyLeaveMinutes": record.early_leave_minutes,
        "overtimeHours": record.overtime_hours,
        "notes": record.notes,
        "breakStartedAt": to_iso(record.break_started_at),
    }


def punch_to_json(punch: PunchRecord) -> Dict[str, Any]:
    return {
        "id": punch.punch_id,
        "employeeId": punch.employee_id,
        "attendanceRecordId": punch.record_id,
        "punchType": punch.punch_type.value,
        "punchTime": to_iso(punch.punch_time),
        "location": location_to_json(punch.location),
        "deviceInfo": punch.device_info,
        "isManual": punch.is_manual,
        "notes": punch.notes,
    }


def break_to_json(session: BreakSession) -> Dict[str, Any]:
    return {
        "id": session.session_id,
        "attendanceRecordId": session.record_id,
        "employeeId": session.employee_id,
        "startTime": to_iso(session.start_time),
        "endTime": to_iso(session.end_time),
        "duration": session.duration_minutes,
    }
