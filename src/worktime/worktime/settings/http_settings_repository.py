from __future__ import annotations

from typing import Optional

from ..api.client import ApiClient
from .mapping import settings_from_json
from .model import AttendanceSettings
from .repository import SettingsRepository


class HttpSettingsRepository(SettingsRepository):
    def __init__(self, client: ApiClient):
        self._client = client

    def get_for_employee(self, employee_id: str) -> Optional[AttendanceSettings]:
        data = self._client.get("/api/attendance/settings", params={"employeeId": employee_id})
        if not data:
            return None
        return settings_from_json(data)
