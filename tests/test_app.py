import sys

from src.worktime.worktime.container import Container
from src.worktime.worktime.database.bootstrap import list_tables
from src.worktime.worktime.location.provider import IpGeolocationProvider
from src.worktime.worktime.main import create_app


def test_create_app_wires_the_container(monkeypatch, tmp_path):
    monkeypatch.delitem(sys.modules, "config.testing", raising=False)
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("SYNC_DB_PATH", str(tmp_path / "agent.sqlite3"))
    monkeypatch.setenv("EMPLOYEE_ID", "emp-42")
    monkeypatch.setenv("GEOLOCATION_URL", "http://geo.test/json")

    app = create_app()

    container = app.extensions["worktime"]
    assert isinstance(container, Container)
    assert app.config["EMPLOYEE_ID"] == "emp-42"
    assert list_tables(container.conn) == ["sync_meta", "sync_queue"]
    assert isinstance(container.attendance_service._location_provider, IpGeolocationProvider)
    assert len(container.attendance_service.transitions) == 1

    rules = {r.rule for r in app.url_map.iter_rules()}
    assert "/api/tracker/punch-in" in rules
    assert "/api/tracker/idle" in rules
    assert "/api/tracker/settings" in rules
    assert "/api/tracker/sync/force" in rules
    assert "/api/tracker/captures" in rules
