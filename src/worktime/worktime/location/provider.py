from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from ..attendance.model import Location
from ..core.constants import DEFAULT_GEOLOCATION_TIMEOUT_SECONDS

log = logging.getLogger(__name__)


class LocationProvider(Protocol):
    def get_location(self, *, timeout: float) -> Optional[Location]:
        raise NotImplementedError


class StaticLocationProvider(LocationProvider):
    """Fixed coordinates, e.g. a desk agent installed at the office."""

    def __init__(self, location: Location):
        self._location = location

    def get_location(self, *, timeout: float) -> Optional[Location]:
        return self._location


class IpGeolocationProvider(LocationProvider):
    """Looks the device up through an IP geolocation endpoint.

    Expects a JSON body with `latitude`/`longitude` (or `lat`/`lon`).
    """

    def __init__(self, url: str, *, session: Optional[requests.Session] = None):
        self._url = url
        self._session = session or requests.Session()

    def get_location(self, *, timeout: float) -> Optional[Location]:
        resp = self._session.get(self._url, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
        lat = data.get("latitude", data.get("lat"))
        lon = data.get("longitude", data.get("lon"))
        if lat is None or lon is None:
            return None
        address = data.get("address") or ", ".join(p for p in (data.get("city"), data.get("country")) if p) or None
        return Location(latitude=float(lat), longitude=float(lon), address=address)


def capture_location(
    provider: Optional[LocationProvider],
    *,
    timeout: float = DEFAULT_GEOLOCATION_TIMEOUT_SECONDS,
) -> Optional[Location]:
    """Best effort: any failure is logged and yields None."""

    if provider is None:
        return None
    try:
        return provider.get_location(timeout=timeout)
    except Exception as e:
        log.warning("Location capture failed: %s", e)
        return None
