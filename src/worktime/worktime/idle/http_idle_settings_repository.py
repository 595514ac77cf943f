from __future__ import annotations

from typing import Optional

from ..api.client import ApiClient
from .mapping import idle_settings_from_json
from .model import IdleSettings
from .repository import IdleSettingsRepository


class HttpIdleSettingsRepository(IdleSettingsRepository):
    def __init__(self, client: ApiClient):
        self._client = client

    def get_for_employee(self, employee_id: str) -> Optional[IdleSettings]:
        data = self._client.get("/api/idle/settings", params={"employeeId": employee_id})
        if not data:
            return None
        return idle_settings_from_json(data)
