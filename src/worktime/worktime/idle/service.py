from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_non_negative
from ..core.enums import IdleReason, SyncAction, TrackingState
from ..core.events import EventChannel
from ..core.exceptions import DataAccessError, IdleStateError, ValidationError
from ..sync.dispatcher import ActionDispatcher
from .detector import DetectorSignal, InactivityDetector
from .mapping import idle_session_to_json, idle_settings_to_json
from .model import IdleSession, IdleSettings, IdleState, IdleWarning
from .repository import IdleSettingsRepository

log = logging.getLogger(__name__)


class IdleManagementService:
    """Idle detection for the work session of the employee on this device.

    `total_idle_time` only grows during a work session and goes back to 0
    when `start_monitoring` opens a new one. Idle sessions closed while
    `pause_timer_on_idle` is on are also counted as paused time, which the
    attendance service subtracts at punch-out (`settle_idle_time`).
    """

    def __init__(
        self,
        dispatcher: ActionDispatcher,
        *,
        settings: IdleSettings | None = None,
        settings_repository: IdleSettingsRepository | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._dispatcher = dispatcher
        self._settings = settings or IdleSettings()
        self._settings_repository = settings_repository
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self._detector = InactivityDetector(self._settings)
        self._lock = threading.RLock()

        self._employee_id: Optional[str] = None
        self._monitoring = False
        self._paused = False
        self._current: Optional[IdleSession] = None
        self._total_idle = 0
        self._paused_minutes = 0
        self._sessions: List[IdleSession] = []

        self.state_changes: EventChannel[IdleState] = EventChannel("idle.state_changes")
        self.warnings: EventChannel[IdleWarning] = EventChannel("idle.warnings")

    @property
    def settings(self) -> IdleSettings:
        return self._settings

    def get_state(self, *, now: datetime | None = None) -> IdleState:
        now = now or now_local()
        with self._lock:
            running = self._current.duration_minutes(now) if self._current else 0
            return IdleState(
                is_idle=self._current is not None,
                is_monitoring=self._monitoring and not self._paused,
                total_idle_time=self._total_idle + running,
                settings=self._settings,
                current_idle_session=self._current,
                last_activity_time=self._detector.last_activity,
                warning_active=self._detector.warning_active,
                employee_id=self._employee_id,
            )

    def get_idle_sessions(self) -> List[IdleSession]:
        with self._lock:
            return list(self._sessions)

    def _notify(self, now: datetime) -> IdleState:
        state = self.get_state(now=now)
        self.state_changes.publish(state)
        return state

    def _load_settings(self, employee_id: str) -> None:
        if self._settings_repository is None:
            return
        try:
            loaded = self._settings_repository.get_for_employee(employee_id)
        except DataAccessError as e:
            log.warning("Could not load idle settings for %s, keeping current: %s", employee_id, e)
            return
        if loaded:
            self._apply_settings(loaded)

    def _apply_settings(self, settings: IdleSettings) -> None:
        self._settings = settings
        self._detector.settings = settings

    def start_monitoring(self, employee_id: str, *, now: datetime | None = None) -> IdleState:
        employee_id = require_non_empty(employee_id, "employee_id")
        now = now or now_local()
        with self._lock:
            if self._monitoring and self._employee_id == employee_id and not self._paused:
                return self.get_state(now=now)
            if self._monitoring:
                self._stop(now)

            self._load_settings(employee_id)
            self._employee_id = employee_id
            self._monitoring = True
            self._paused = False
            self._current = None
            self._total_idle = 0
            self._paused_minutes = 0
            self._sessions = []
            if self._settings.enabled:
                self._detector.start(now)
            log.info("Idle monitoring started for %s", employee_id)
            return self._notify(now)

    def _stop(self, now: datetime) -> None:
        if self._current:
            self._end_idle(now)
        self._detector.stop()
        self._monitoring = False
        self._paused = False

    def stop_monitoring(self, *, now: datetime | None = None) -> IdleState:
        now = now or now_local()
        with self._lock:
            if not self._monitoring:
                return self.get_state(now=now)
            self._stop(now)
            log.info("Idle monitoring stopped for %s", self._employee_id)
            return self._notify(now)

    def pause_monitoring(self, *, now: datetime | None = None) -> IdleState:
        """Suspend detection (e.g. during a break) without resetting totals."""

        now = now or now_local()
        with self._lock:
            if not self._monitoring or self._paused:
                return self.get_state(now=now)
            if self._current:
                self._end_idle(now)
            self._detector.stop()
            self._paused = True
            return self._notify(now)

    def resume_monitoring(self, *, now: datetime | None = None) -> IdleState:
        now = now or now_local()
        with self._lock:
            if not self._monitoring or not self._paused:
                return self.get_state(now=now)
            self._paused = False
            if self._settings.enabled:
                self._detector.start(now)
            return self._notify(now)

    def record_activity(self, *, now: datetime | None = None) -> IdleState:
        """Input activity reported by the host (debounced on its side)."""

        now = now or now_local()
        with self._lock:
            if not self._monitoring or self._paused:
                return self.get_state(now=now)
            if self._current and self._current.reason == IdleReason.MANUAL:
                return self.get_state(now=now)

            was_warning = self._detector.warning_active
            was_idle = self._detector.record_activity(now)
            if was_idle and self._current and self._settings.auto_resume_on_activity:
                self._end_idle(now)
                return self._notify(now)
            if was_warning:
                return self._notify(now)
            return self.get_state(now=now)

    def poll(self, *, now: datetime | None = None) -> IdleState:
        """Sampling step; the host calls this on its timer."""

        now = now or now_local()
        with self._lock:
            if not self._monitoring or self._paused or self._current:
                return self.get_state(now=now)

            signal = self._detector.poll(now)
            if signal == DetectorSignal.WARNING:
                deadline = self._detector.deadline()
                self.warnings.publish(
                    IdleWarning(
                        employee_id=self._employee_id,
                        idle_at=deadline,
                        seconds_remaining=max(0, int((deadline - now).total_seconds())),
                    )
                )
                return self._notify(now)
            if signal == DetectorSignal.IDLE:
                self._begin_idle(IdleReason.INACTIVITY, start=self._detector.idle_since, notes=None, now=now)
                return self._notify(now)
            return self.get_state(now=now)

    def manual_start_idle(self, *, notes: str | None = None, now: datetime | None = None) -> IdleState:
        now = now or now_local()
        with self._lock:
            if not self._monitoring:
                raise IdleStateError("No work session is being monitored")
            if self._paused:
                raise IdleStateError("Idle tracking is paused during a break")
            if self._current and self._current.reason == IdleReason.MANUAL:
                raise IdleStateError("Already idle")
            if self._current:
                self._end_idle(now)

            self._detector.stop()
            self._begin_idle(IdleReason.MANUAL, start=now, notes=notes, now=now)
            return self._notify(now)

    def manual_end_idle(self, *, now: datetime | None = None) -> IdleState:
        now = now or now_local()
        with self._lock:
            if not self._current:
                raise IdleStateError("Not idle")
            self._end_idle(now)
            if self._settings.enabled and not self._paused:
                self._detector.start(now)
            return self._notify(now)

    def settle_idle_time(self, employee_id: str, *, now: datetime) -> Optional[int]:
        """Close any open idle session; paused idle minutes of the session.

        None when this service is not tracking `employee_id`.
        """

        with self._lock:
            if not self._monitoring or self._employee_id != employee_id:
                return None
            if self._current:
                self._end_idle(now)
                self._notify(now)
            return self._paused_minutes

    def paused_idle_minutes(self, employee_id: str, *, now: datetime) -> Optional[int]:
        """Paused idle minutes so far; an open session counts up to `now`."""

        with self._lock:
            if not self._monitoring or self._employee_id != employee_id:
                return None
            running = 0
            if self._current and self._settings.pause_timer_on_idle:
                running = self._current.duration_minutes(now)
            return self._paused_minutes + running

    def update_settings(self, *, now: datetime | None = None, **changes: Any) -> IdleSettings:
        now = now or now_local()
        unknown = set(changes) - set(IdleSettings.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown idle settings: {', '.join(sorted(unknown))}")
        if "idle_threshold_minutes" in changes:
            if require_non_negative(changes["idle_threshold_minutes"], "idle_threshold_minutes") <= 0:
                raise ValidationError("idle_threshold_minutes must be positive")
        if "warning_time_minutes" in changes:
            require_non_negative(changes["warning_time_minutes"], "warning_time_minutes")

        with self._lock:
            updated = replace(self._settings, **changes)
            was_enabled = self._settings.enabled
            self._apply_settings(updated)

            if was_enabled and not updated.enabled:
                if self._current and self._current.reason == IdleReason.INACTIVITY:
                    self._end_idle(now)
                self._detector.stop()
            elif updated.enabled and self._monitoring and not self._paused and not self._current:
                if not self._detector.running:
                    self._detector.start(now)

            if self._employee_id:
                self._dispatcher.submit(
                    SyncAction.IDLE_SETTINGS_UPDATE,
                    {"employeeId": self._employee_id, **idle_settings_to_json(updated)},
                    now=now,
                    queue_on_failure=True,
                )
            self._notify(now)
            return updated

    def handle_tracking_transition(self, event) -> None:
        """Follow the attendance state machine (subscribed by the container)."""

        if event.state == TrackingState.PUNCHED_IN:
            if self._monitoring and self._employee_id == event.employee_id and self._paused:
                self.resume_monitoring(now=event.at)
            else:
                self.start_monitoring(event.employee_id, now=event.at)
        elif event.state == TrackingState.ON_BREAK:
            self.pause_monitoring(now=event.at)
        elif event.state == TrackingState.PUNCHED_OUT and self._employee_id == event.employee_id:
            self.stop_monitoring(now=event.at)

    def _begin_idle(self, reason: IdleReason, *, start: datetime, notes: Optional[str], now: datetime) -> None:
        session = IdleSession(
            session_id=self._new_id(),
            employee_id=self._employee_id,
            start_time=start,
            reason=reason,
            notes=notes,
        )
        self._current = session
        self._dispatcher.submit(SyncAction.IDLE_START, idle_session_to_json(session), now=now, queue_on_failure=True)
        log.info("Idle started for %s (%s)", self._employee_id, reason.value)

    def _end_idle(self, now: datetime) -> None:
        session = self._current
        closed = replace(session, end_time=max(now, session.start_time))
        minutes = closed.duration_minutes()

        self._current = None
        self._total_idle += minutes
        if self._settings.pause_timer_on_idle:
            self._paused_minutes += minutes
        self._sessions.append(closed)
        if session.reason == IdleReason.INACTIVITY:
            self._detector.end_idle(now)

        self._dispatcher.submit(SyncAction.IDLE_END, idle_session_to_json(closed), now=now, queue_on_failure=True)
        log.info("Idle ended for %s after %d minute(s)", self._employee_id, minutes)
