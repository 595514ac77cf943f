from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import requests

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HEARTBEAT_URL
from ..core.enums import ConnectionQuality
from ..core.events import EventChannel
from .model import NetworkState

log = logging.getLogger(__name__)

_QUALITY_BY_TYPE = {
    "4g": ConnectionQuality.EXCELLENT,
    "3g": ConnectionQuality.GOOD,
    "2g": ConnectionQuality.FAIR,
    "slow-2g": ConnectionQuality.POOR,
}

_BATCH_SIZE_BY_QUALITY = {
    ConnectionQuality.EXCELLENT: 50,
    ConnectionQuality.GOOD: 20,
    ConnectionQuality.FAIR: 10,
    ConnectionQuality.POOR: 5,
    ConnectionQuality.UNKNOWN: 10,
}


class NetworkDetectionService:
    """Tracks online/offline state for the agent.

    `changes` publishes a NetworkState on real transitions only, so a
    subscriber sees one event per offline -> online flip.
    """

    def __init__(
        self,
        *,
        initially_online: bool = True,
        heartbeat_url: str = DEFAULT_HEARTBEAT_URL,
        timeout: float = 5,
        connection_type: str = "unknown",
        session: Optional[requests.Session] = None,
    ):
        self._online = bool(initially_online)
        self._heartbeat_url = heartbeat_url
        self._timeout = float(timeout)
        self._connection_type = connection_type
        self._session = session or requests.Session()
        self._last_online_time: Optional[datetime] = None
        self._last_offline_time: Optional[datetime] = None
        self.changes: EventChannel[NetworkState] = EventChannel("network.changes")

    def is_online(self) -> bool:
        return self._online

    def set_online(self, *, now: datetime | None = None) -> None:
        now = now or now_local()
        was_online = self._online
        self._online = True
        self._last_online_time = now
        if not was_online:
            log.info("Network connection restored")
            self.changes.publish(self.get_network_state(now=now))

    def set_offline(self, *, now: datetime | None = None) -> None:
        now = now or now_local()
        was_online = self._online
        self._online = False
        if was_online:
            self._last_offline_time = now
            log.info("Network connection lost")
            self.changes.publish(self.get_network_state(now=now))

    def set_connection_type(self, connection_type: str) -> None:
        self._connection_type = (connection_type or "unknown").lower()

    def check_network_status(self, *, now: datetime | None = None) -> bool:
        """Probe the heartbeat URL and update the state accordingly.

        Any HTTP response counts as reachable; only transport failures mean
        offline.
        """

        try:
            self._session.head(self._heartbeat_url, timeout=self._timeout, allow_redirects=False)
        except requests.RequestException as e:
            log.debug("Heartbeat to %s failed: %s", self._heartbeat_url, e)
            self.set_offline(now=now)
            return False
        self.set_online(now=now)
        return True

    def get_network_state(self, *, now: datetime | None = None) -> NetworkState:
        offline_for = None
        if not self._online and self._last_offline_time:
            offline_for = ((now or now_local()) - self._last_offline_time).total_seconds()
        return NetworkState(
            is_online=self._online,
            connection_type=self._connection_type,
            last_online_time=self._last_online_time,
            last_offline_time=self._last_offline_time,
            offline_duration_seconds=offline_for,
        )

    def get_connection_quality(self) -> ConnectionQuality:
        return _QUALITY_BY_TYPE.get(self._connection_type, ConnectionQuality.UNKNOWN)

    def can_sync_data(self) -> bool:
        return self._online and self.get_connection_quality() != ConnectionQuality.POOR

    def get_recommended_batch_size(self) -> int:
        if not self._online:
            return 0
        return _BATCH_SIZE_BY_QUALITY[self.get_connection_quality()]
