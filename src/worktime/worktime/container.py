from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .api.client import ApiClient, ApiConfig
from .attendance.factory import AttendanceStrategyFactory
from .attendance.http_attendance_repository import HttpAttendanceRepository
from .attendance.service import AttendanceTrackingService
from .capture.service import ScreenCaptureService
from .database.bootstrap import apply_schema
from .database.connection import DBConfig, DatabaseConnection
from .idle.http_idle_settings_repository import HttpIdleSettingsRepository
from .idle.model import IdleSettings
from .idle.service import IdleManagementService
from .location.provider import IpGeolocationProvider, LocationProvider
from .network.service import NetworkDetectionService
from .settings.http_settings_repository import HttpSettingsRepository
from .settings.service import SettingsService
from .sync.dispatcher import ActionDispatcher
from .sync.sqlite_queue_repository import SQLiteSyncQueueRepository
from .sync.service import SyncService
from .sync.transport import HttpSyncTransport


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    api: ApiClient

    attendance_repo: HttpAttendanceRepository
    settings_repo: HttpSettingsRepository
    idle_settings_repo: HttpIdleSettingsRepository
    sync_queue: SQLiteSyncQueueRepository

    network_service: NetworkDetectionService
    dispatcher: ActionDispatcher
    sync_service: SyncService
    settings_service: SettingsService
    idle_service: IdleManagementService
    attendance_service: AttendanceTrackingService
    capture_service: ScreenCaptureService


def build_container(*, agent_config: dict, location_provider: Optional[LocationProvider] = None) -> Container:
    """Wire every service once for this process."""

    conn = DatabaseConnection(DBConfig(path=str(agent_config["sync_db_path"])))
    apply_schema(conn)

    api = ApiClient(
        ApiConfig(
            base_url=str(agent_config["api_base_url"]),
            timeout=float(agent_config.get("request_timeout", 10)),
            token=agent_config.get("api_token"),
        )
    )

    attendance_repo = HttpAttendanceRepository(api)
    settings_repo = HttpSettingsRepository(api)
    idle_settings_repo = HttpIdleSettingsRepository(api)
    sync_queue = SQLiteSyncQueueRepository(conn)

    network_service = NetworkDetectionService(
        initially_online=bool(agent_config.get("initially_online", True)),
        heartbeat_url=str(agent_config["heartbeat_url"]),
    )
    transport = HttpSyncTransport(api)
    dispatcher = ActionDispatcher(network_service, sync_queue, transport)
    sync_service = SyncService(
        sync_queue,
        transport,
        network_service,
        dispatcher=dispatcher,
        auto_sync=bool(agent_config.get("auto_sync", True)),
        backoff_base_seconds=float(agent_config.get("backoff_base_seconds", 30)),
        backoff_max_seconds=float(agent_config.get("backoff_max_seconds", 1800)),
        sync_interval_seconds=float(agent_config.get("sync_interval_seconds", 60)),
    )
    settings_service = SettingsService(settings_repo, dispatcher)
    idle_service = IdleManagementService(
        dispatcher,
        settings=IdleSettings(),
        settings_repository=idle_settings_repo,
    )
    if location_provider is None and agent_config.get("geolocation_url"):
        location_provider = IpGeolocationProvider(str(agent_config["geolocation_url"]))

    attendance_service = AttendanceTrackingService(
        attendance_repo,
        settings_service,
        dispatcher,
        location_provider=location_provider,
        idle_source=idle_service,
        strategy_factory=AttendanceStrategyFactory(),
        device_info=str(agent_config.get("device_info", "worktime-agent")),
    )
    attendance_service.transitions.subscribe(idle_service.handle_tracking_transition)
    capture_service = ScreenCaptureService(dispatcher)

    return Container(
        conn=conn,
        api=api,
        attendance_repo=attendance_repo,
        settings_repo=settings_repo,
        idle_settings_repo=idle_settings_repo,
        sync_queue=sync_queue,
        network_service=network_service,
        dispatcher=dispatcher,
        sync_service=sync_service,
        settings_service=settings_service,
        idle_service=idle_service,
        attendance_service=attendance_service,
        capture_service=capture_service,
    )
