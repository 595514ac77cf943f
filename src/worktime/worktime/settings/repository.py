from __future__ import annotations

from typing import Optional, Protocol

from .model import AttendanceSettings


class SettingsRepository(Protocol):
    def get_for_employee(self, employee_id: str) -> Optional[AttendanceSettings]:
        raise NotImplementedError
