from datetime import datetime

import pytest

from src.worktime.worktime.core.enums import SyncAction
from src.worktime.worktime.core.exceptions import DataAccessError, ValidationError
from src.worktime.worktime.settings.mapping import settings_from_json, settings_to_json
from src.worktime.worktime.settings.model import AttendanceSettings
from src.worktime.worktime.settings.service import SettingsService

T0 = datetime(2025, 1, 6, 9, 0)


class CountingSettings:
    def __init__(self, settings=None):
        self.settings = settings
        self.unreachable = False
        self.calls = 0

    def get_for_employee(self, employee_id):
        self.calls += 1
        if self.unreachable:
            raise DataAccessError("Could not reach server")
        return self.settings


def test_settings_are_cached_per_employee(make_services):
    s = make_services()
    repo = CountingSettings(AttendanceSettings(late_threshold=5))
    service = SettingsService(repo, s.dispatcher)

    assert service.get_settings("emp-1").late_threshold == 5
    service.get_settings("emp-1")
    assert repo.calls == 1

    repo.settings = AttendanceSettings(late_threshold=20)
    assert service.refresh("emp-1").late_threshold == 20


def test_defaults_apply_when_server_has_none_or_is_unreachable(make_services):
    s = make_services()
    repo = CountingSettings()
    service = SettingsService(repo, s.dispatcher)

    assert service.get_settings("emp-1") == AttendanceSettings()

    repo.unreachable = True
    assert service.get_settings("emp-2") == AttendanceSettings()
    service.get_settings("emp-2")
    assert repo.calls == 3


def test_update_is_validated(make_services):
    s = make_services()

    with pytest.raises(ValidationError):
        s.settings.update_settings("emp-1", work_start_time="25:00")
    with pytest.raises(ValidationError):
        s.settings.update_settings("emp-1", work_start_time="18:00")
    with pytest.raises(ValidationError):
        s.settings.update_settings("emp-1", late_threshold=-1)
    with pytest.raises(ValidationError):
        s.settings.update_settings("emp-1", working_days=["funday"])
    with pytest.raises(ValidationError):
        s.settings.update_settings("emp-1", half_day_fraction=1.5)
    with pytest.raises(ValidationError):
        s.settings.update_settings("emp-1", lunch=True)
    assert s.transport.delivered == []


def test_update_is_sent_and_cached(make_services):
    s = make_services()

    updated = s.settings.update_settings("emp-1", now=T0, work_start_time="08:30", working_days=["monday", "tuesday"])

    assert updated.work_start_time == "08:30"
    assert updated.working_days == (1, 2)
    assert s.settings.get_settings("emp-1") == updated
    action, payload = s.transport.delivered[-1]
    assert action == SyncAction.SETTINGS_UPDATE
    assert payload["employeeId"] == "emp-1"
    assert payload["workStartTime"] == "08:30"
    assert payload["workingDays"] == [1, 2]


def test_failed_update_keeps_previous_settings(make_services):
    s = make_services()
    s.transport.fail_when = lambda action, payload: True

    with pytest.raises(DataAccessError):
        s.settings.update_settings("emp-1", now=T0, late_threshold=30)

    assert s.settings.get_settings("emp-1").late_threshold == AttendanceSettings().late_threshold


def test_server_payload_mapping():
    settings = settings_from_json(
        {
            "workStartTime": "08:00",
            "workEndTime": "16:30",
            "lateThreshold": 10,
            "workingDays": ["Monday", "wednesday", 5],
            "timezone": None,
        }
    )

    assert settings.work_end_time == "16:30"
    assert settings.working_days == (1, 3, 5)
    assert settings.timezone == AttendanceSettings().timezone
    assert settings_to_json(settings)["lateThreshold"] == 10


def test_unreadable_working_days_fall_back_to_defaults():
    settings = settings_from_json({"workingDays": ["someday"]})

    assert settings.working_days == AttendanceSettings().working_days


def test_standard_hours_exclude_the_break():
    assert AttendanceSettings().standard_hours == 7
    assert AttendanceSettings(work_start_time="08:00", work_end_time="12:00", break_duration=0).standard_hours == 4
