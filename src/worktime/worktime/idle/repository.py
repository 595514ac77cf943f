from __future__ import annotations

from typing import Optional, Protocol

from .model import IdleSettings


class IdleSettingsRepository(Protocol):
    def get_for_employee(self, employee_id: str) -> Optional[IdleSettings]:
        raise NotImplementedError
