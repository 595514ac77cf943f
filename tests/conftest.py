from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, Callable, Optional

import pytest

from src.worktime.worktime.attendance.model import AttendanceRecord
from src.worktime.worktime.attendance.service import AttendanceTrackingService
from src.worktime.worktime.capture.service import ScreenCaptureService
from src.worktime.worktime.core.enums import SyncAction
from src.worktime.worktime.core.exceptions import DataAccessError
from src.worktime.worktime.database.bootstrap import apply_schema
from src.worktime.worktime.database.connection import DBConfig, DatabaseConnection
from src.worktime.worktime.idle.service import IdleManagementService
from src.worktime.worktime.network.service import NetworkDetectionService
from src.worktime.worktime.settings.model import AttendanceSettings
from src.worktime.worktime.settings.service import SettingsService
from src.worktime.worktime.sync.dispatcher import ActionDispatcher
from src.worktime.worktime.sync.service import SyncService
from src.worktime.worktime.sync.sqlite_queue_repository import SQLiteSyncQueueRepository


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2025, 1, 6, 9, 0, 0)


class FakeTransport:
    """Records deliveries; `fail_when(action, payload)` decides failures."""

    def __init__(self):
        self.delivered: list[tuple[SyncAction, dict]] = []
        self.attempts: list[tuple[SyncAction, dict]] = []
        self.fail_when: Callable[[SyncAction, dict], bool] = lambda action, payload: False
        self.on_deliver: Optional[Callable[[SyncAction, dict], None]] = None

    def deliver(self, action: SyncAction, payload: dict) -> Any:
        self.attempts.append((action, payload))
        if self.on_deliver:
            self.on_deliver(action, payload)
        if self.fail_when(action, payload):
            raise DataAccessError(f"server rejected {action.value}", status_code=500)
        self.delivered.append((action, payload))
        return {"ok": True}

    def actions(self) -> list[SyncAction]:
        return [a for a, _ in self.delivered]


class InMemoryRecords:
    def __init__(self, records: Optional[list[AttendanceRecord]] = None):
        self._records = list(records or [])
        self.unreachable = False

    def add(self, record: AttendanceRecord) -> None:
        self._records.append(record)

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        if self.unreachable:
            raise DataAccessError("Could not reach server")
        for r in self._records:
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def list_for_employee(self, employee_id: str, *, start_date: date, end_date: date):
        if self.unreachable:
            raise DataAccessError("Could not reach server")
        return [r for r in self._records if r.employee_id == employee_id and start_date <= r.work_date <= end_date]


@dataclass
class InMemorySettings:
    by_employee: dict[str, AttendanceSettings] = field(default_factory=dict)
    unreachable: bool = False

    def get_for_employee(self, employee_id: str) -> Optional[AttendanceSettings]:
        if self.unreachable:
            raise DataAccessError("Could not reach server")
        return self.by_employee.get(employee_id)


class FakeLocationProvider:
    def __init__(self, location=None, error: Optional[Exception] = None):
        self.location = location
        self.error = error
        self.calls = 0

    def get_location(self, *, timeout: float):
        self.calls += 1
        if self.error:
            raise self.error
        return self.location


class Counter:
    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"{self.prefix}-{self.n}"


@pytest.fixture
def conn_factory(tmp_path) -> DatabaseConnection:
    conn = DatabaseConnection(DBConfig(path=str(tmp_path / "queue.sqlite3")))
    apply_schema(conn)
    return conn


@pytest.fixture
def make_services(conn_factory):
    """Build the full service graph around in-memory fakes.

    Builds within one test share the queue database, like a restarted agent.
    """

    item_ids = Counter("item")

    def build(
        *,
        settings: Optional[AttendanceSettings] = None,
        online: bool = True,
        records: Optional[list[AttendanceRecord]] = None,
        location_provider=None,
        auto_sync: bool = True,
        employee_id: str = "emp-1",
    ) -> SimpleNamespace:
        network = NetworkDetectionService(initially_online=online)
        queue = SQLiteSyncQueueRepository(conn_factory)
        transport = FakeTransport()
        dispatcher = ActionDispatcher(network, queue, transport, id_factory=item_ids)
        sync = SyncService(
            queue,
            transport,
            network,
            dispatcher=dispatcher,
            auto_sync=auto_sync,
            backoff_base_seconds=30,
            backoff_max_seconds=600,
            sync_interval_seconds=60,
        )
        settings_repo = InMemorySettings({employee_id: settings} if settings else {})
        settings_service = SettingsService(settings_repo, dispatcher)
        idle = IdleManagementService(dispatcher, id_factory=Counter("idle"))
        records_repo = InMemoryRecords(records)
        attendance = AttendanceTrackingService(
            records_repo,
            settings_service,
            dispatcher,
            location_provider=location_provider,
            idle_source=idle,
            id_factory=Counter("rec"),
        )
        attendance.transitions.subscribe(idle.handle_tracking_transition)
        capture = ScreenCaptureService(dispatcher, id_factory=Counter("cap"))
        return SimpleNamespace(
            employee_id=employee_id,
            network=network,
            queue=queue,
            transport=transport,
            dispatcher=dispatcher,
            sync=sync,
            settings_repo=settings_repo,
            settings=settings_service,
            idle=idle,
            records=records_repo,
            attendance=attendance,
            capture=capture,
            conn_factory=conn_factory,
        )

    return build


@pytest.fixture
def location_provider():
    """Factory for fake location providers."""

    return FakeLocationProvider
