import pytest
import requests

from src.worktime.worktime.attendance.model import Location
from src.worktime.worktime.location.provider import IpGeolocationProvider, StaticLocationProvider, capture_location


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.timeouts = []

    def get(self, url, timeout):
        self.timeouts.append(timeout)
        return self.response


def test_ip_lookup_reads_lat_lon_and_builds_address():
    session = FakeSession(FakeResponse({"lat": 10.5, "lon": 106.25, "city": "Saigon", "country": "VN"}))
    provider = IpGeolocationProvider("http://geo.test/json", session=session)

    location = provider.get_location(timeout=2)

    assert location == Location(latitude=10.5, longitude=106.25, address="Saigon, VN")
    assert session.timeouts == [2]


def test_ip_lookup_without_coordinates():
    provider = IpGeolocationProvider("http://geo.test/json", session=FakeSession(FakeResponse({"status": "fail"})))

    assert provider.get_location(timeout=2) is None


@pytest.mark.parametrize(
    "provider",
    [
        None,
        IpGeolocationProvider("http://geo.test/json", session=FakeSession(FakeResponse({}, status_code=500))),
    ],
)
def test_capture_never_raises(provider):
    assert capture_location(provider, timeout=1) is None


def test_static_provider():
    spot = Location(latitude=1.0, longitude=2.0, address="Front desk")

    assert capture_location(StaticLocationProvider(spot)) == spot
