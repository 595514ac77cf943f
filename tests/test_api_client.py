import pytest
import requests

from src.worktime.worktime.api.client import ApiClient, ApiConfig
from src.worktime.worktime.core.exceptions import DataAccessError


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        self._body = body
        self.content = raw if raw is not None else (b"x" if body is not None else b"")

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, timeout, kwargs))
        if self.error:
            raise self.error
        return self.response


def _client(session, **config):
    return ApiClient(ApiConfig(base_url="http://clinic.test/", timeout=3, **config), session=session)


def test_envelope_is_unwrapped_and_timeout_always_sent():
    session = FakeSession(FakeResponse(body={"success": True, "data": {"id": "r1"}}))

    data = _client(session, token="secret").get("/api/attendance/record", params={"employeeId": "emp-1"})

    assert data == {"id": "r1"}
    method, url, timeout, kwargs = session.requests[0]
    assert (method, url, timeout) == ("GET", "http://clinic.test/api/attendance/record", 3)
    assert kwargs["params"] == {"employeeId": "emp-1"}
    assert session.headers["Authorization"] == "Bearer secret"


def test_plain_body_is_returned_as_is():
    session = FakeSession(FakeResponse(body=[1, 2]))

    assert _client(session).post("api/x", json={"a": 1}) == [1, 2]


def test_transport_errors_become_data_access_errors():
    session = FakeSession(error=requests.Timeout("read timed out"))

    with pytest.raises(DataAccessError) as exc:
        _client(session).get("/api/x")

    assert exc.value.status_code is None


def test_error_status_carries_server_message():
    session = FakeSession(FakeResponse(status_code=404, body={"success": False, "error": "Record not found"}))

    with pytest.raises(DataAccessError) as exc:
        _client(session).get("/api/x")

    assert str(exc.value) == "Record not found"
    assert exc.value.status_code == 404


def test_unsuccessful_envelope_with_ok_status_is_an_error():
    session = FakeSession(FakeResponse(status_code=200, body={"success": False, "message": "Already punched in"}))

    with pytest.raises(DataAccessError, match="Already punched in"):
        _client(session).post("/api/x", json={})


def test_non_json_error_body():
    session = FakeSession(FakeResponse(status_code=502, raw=b"<html>bad gateway</html>"))

    with pytest.raises(DataAccessError, match="status 502"):
        _client(session).get("/api/x")
