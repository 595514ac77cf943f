from __future__ import annotations

from typing import Any, Dict, Protocol

from ..api.client import ApiClient
from ..core.enums import SyncAction

ACTION_ENDPOINTS: Dict[SyncAction, str] = {
    SyncAction.PUNCH_IN: "/api/attendance/punch-in",
    SyncAction.PUNCH_OUT: "/api/attendance/punch-out",
    SyncAction.BREAK_START: "/api/break-sessions",
    SyncAction.BREAK_END: "/api/break-sessions/end",
    SyncAction.IDLE_START: "/api/idle/sessions",
    SyncAction.IDLE_END: "/api/idle/sessions/end",
    SyncAction.SETTINGS_UPDATE: "/api/attendance/settings",
    SyncAction.IDLE_SETTINGS_UPDATE: "/api/idle/settings",
    SyncAction.SCREEN_CAPTURE: "/api/screen-captures",
}


class SyncTransport(Protocol):
    def deliver(self, action: SyncAction, payload: Dict[str, Any]) -> Any:
        """Send one action to the server. Raises DataAccessError on failure."""

        raise NotImplementedError


class HttpSyncTransport(SyncTransport):
    def __init__(self, client: ApiClient):
        self._client = client

    def deliver(self, action: SyncAction, payload: Dict[str, Any]) -> Any:
        return self._client.post(ACTION_ENDPOINTS[action], json=payload)
