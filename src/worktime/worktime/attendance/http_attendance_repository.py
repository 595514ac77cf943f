from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..api.client import ApiClient
from .mapping import record_from_json
from .model import AttendanceRecord
from .repository import AttendanceRepository


class HttpAttendanceRepository(AttendanceRepository):
    def __init__(self, client: ApiClient):
        self._client = client

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        data = self._client.get(
            "/api/attendance/record",
            params={"employeeId": employee_id, "date": work_date.isoformat()},
        )
        if not data:
            return None
        return record_from_json(data)

    def list_for_employee(self, employee_id: str, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        data = self._client.get(
            "/api/attendance/records",
            params={
                "employeeId": employee_id,
                "startDate": start_date.isoformat(),
                "endDate": end_date.isoformat(),
            },
        )
        if isinstance(data, dict):
            data = data.get("records") or []
        return [record_from_json(r) for r in data or []]
