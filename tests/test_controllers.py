from __future__ import annotations

import base64
from datetime import date, datetime, timedelta

import pytest
from flask import Flask

from src.worktime.worktime.attendance.controller import register as register_attendance
from src.worktime.worktime.attendance.model import AttendanceRecord
from src.worktime.worktime.capture.controller import register as register_capture
from src.worktime.worktime.container import Container
from src.worktime.worktime.core.enums import AttendanceStatus
from src.worktime.worktime.idle.controller import register as register_idle
from src.worktime.worktime.settings.controller import register as register_settings
from src.worktime.worktime.settings.model import AttendanceSettings
from src.worktime.worktime.sync.controller import register as register_sync

EVERY_DAY = AttendanceSettings(working_days=(0, 1, 2, 3, 4, 5, 6))


def _app(s, employee_id="emp-1") -> Flask:
    container = Container(
        conn=s.conn_factory,
        api=None,
        attendance_repo=s.records,
        settings_repo=s.settings_repo,
        idle_settings_repo=None,
        sync_queue=s.queue,
        network_service=s.network,
        dispatcher=s.dispatcher,
        sync_service=s.sync,
        settings_service=s.settings,
        idle_service=s.idle,
        attendance_service=s.attendance,
        capture_service=s.capture,
    )
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["EMPLOYEE_ID"] = employee_id
    register_attendance(app, container)
    register_idle(app, container)
    register_settings(app, container)
    register_sync(app, container)
    register_capture(app, container)
    return app


@pytest.fixture
def services(make_services):
    return make_services(settings=EVERY_DAY)


@pytest.fixture
def client(services):
    return _app(services).test_client()


def test_punch_in_then_status(client):
    resp = client.post("/api/tracker/punch-in", json={"location": {"latitude": 1.5, "longitude": 2.5}})

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["record"]["status"] in ("present", "late")
    assert body["data"]["punch"]["location"]["latitude"] == 1.5
    assert body["data"]["presentation"]["label"] in ("Present", "Late")

    status = client.get("/api/tracker/status").get_json()["data"]
    assert status["state"] == "punched_in"
    assert status["is_punched_in"] is True


def test_state_violations_are_conflicts(client):
    resp = client.post("/api/tracker/punch-out", json={})
    assert resp.status_code == 409
    assert resp.get_json() == {"success": False, "error": "No punch in record found for today"}

    client.post("/api/tracker/punch-in", json={})
    assert client.post("/api/tracker/punch-in", json={}).status_code == 409
    assert client.post("/api/tracker/break/end", json={}).status_code == 409


def test_break_and_punch_out(client):
    client.post("/api/tracker/punch-in", json={})

    assert client.post("/api/tracker/break/start", json={}).status_code == 200
    assert client.get("/api/tracker/status").get_json()["data"]["state"] == "on_break"
    assert client.post("/api/tracker/break/end", json={}).status_code == 200

    resp = client.post("/api/tracker/punch-out", json={"notes": "done"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["record"]["notes"] == "done"


def test_bad_location_is_rejected(client):
    resp = client.post("/api/tracker/punch-in", json={"location": {"latitude": "north"}})

    assert resp.status_code == 400


def test_server_failure_is_service_unavailable(services):
    services.transport.fail_when = lambda action, payload: True
    client = _app(services).test_client()

    resp = client.post("/api/tracker/punch-in", json={})

    assert resp.status_code == 503
    assert resp.get_json()["success"] is False


def test_missing_employee_is_a_bad_request(services):
    client = _app(services, employee_id=None).test_client()

    assert client.get("/api/tracker/status").status_code == 400
    assert client.get("/api/tracker/status?employeeId=emp-1").status_code == 200


def test_summary_and_history(services, client):
    monday = date(2025, 1, 6)
    for i, st in enumerate([AttendanceStatus.PRESENT, AttendanceStatus.LATE]):
        day = monday + timedelta(days=i)
        services.records.add(
            AttendanceRecord(
                record_id=f"r{i}",
                employee_id="emp-1",
                work_date=day,
                status=st,
                punch_in_time=datetime(day.year, day.month, day.day, 9, 0),
                total_working_hours=8.0,
            )
        )

    summary = client.get("/api/tracker/summary?start=2025-01-06&end=2025-01-10").get_json()["data"]
    assert summary["total_working_days"] == 5
    assert summary["present_days"] == 2
    assert summary["late_days"] == 1
    assert summary["attendance_rate"] == 40
    assert summary["punctuality_score"] == 50

    assert client.get("/api/tracker/summary?start=2025-01-10&end=2025-01-06").status_code == 400
    assert client.get("/api/tracker/summary?start=06/01/2025").status_code == 400
    assert client.get("/api/tracker/history?days=abc").status_code == 400
    assert client.get("/api/tracker/history?days=0").status_code == 400


def test_settings_endpoints_speak_camel_case(client):
    current = client.get("/api/tracker/settings").get_json()["data"]
    assert current["workStartTime"] == "09:00"

    resp = client.post("/api/tracker/settings", json={"workStartTime": "08:30", "lateThreshold": 5})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["workStartTime"] == "08:30"
    assert resp.get_json()["data"]["lateThreshold"] == 5

    assert client.post("/api/tracker/settings", json={"workStartTime": "25:00"}).status_code == 400


def test_idle_endpoints(client):
    state = client.get("/api/tracker/idle").get_json()["data"]
    assert state["is_monitoring"] is False

    assert client.post("/api/tracker/idle/start", json={}).status_code == 409

    client.post("/api/tracker/idle/monitor", json={"enabled": True})
    resp = client.post("/api/tracker/idle/start", json={"notes": "phone call"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["current_idle_session"]["notes"] == "phone call"
    assert client.post("/api/tracker/idle/end", json={}).status_code == 200
    assert len(client.get("/api/tracker/idle/sessions").get_json()["data"]) == 1

    resp = client.post("/api/tracker/idle/settings", json={"idleThresholdMinutes": 10})
    assert resp.get_json()["data"]["idleThresholdMinutes"] == 10
    assert client.post("/api/tracker/idle/settings", json={"idleThresholdMinutes": 0}).status_code == 400


def test_sync_endpoints(services, client):
    services.network.set_offline()
    client.post("/api/tracker/punch-in", json={})

    state = client.get("/api/tracker/sync").get_json()["data"]
    assert state["stats"]["total_pending"] == 1
    assert state["network"]["is_online"] is False
    assert state["queue"][0]["action"] == "punch_in"

    assert client.post("/api/tracker/sync/items/missing/abandon").status_code == 400
    assert client.post("/api/tracker/sync/auto", json={"enabled": False}).get_json()["data"] == {"enabled": False}

    services.network.set_online()
    progress = client.post("/api/tracker/sync/force").get_json()["data"]
    assert progress["synced_items"] == 1
    assert client.post("/api/tracker/sync/retry").status_code == 200


def test_capture_upload(services, client):
    image = base64.b64encode(b"\x89PNG fake").decode("ascii")

    resp = client.post("/api/tracker/captures", json={"imageData": image, "contentType": "image/png"})
    assert resp.status_code == 201
    assert resp.get_json()["data"]["queued"] is False

    assert client.post("/api/tracker/captures", json={"imageData": "***"}).status_code == 400
    assert client.post("/api/tracker/captures", json={"imageData": image, "contentType": "image/gif"}).status_code == 400
