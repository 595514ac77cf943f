from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Protocol

from ..common.datetime_utils import count_working_days, is_working_day, now_local, whole_minutes_between
from ..common.single_flight import SingleFlight
from ..core.constants import DEFAULT_GEOLOCATION_TIMEOUT_SECONDS
from ..core.enums import AttendanceStatus, PunchType, SyncAction, TrackingState
from ..core.events import EventChannel
from ..core.exceptions import (
    AlreadyOnBreakError,
    AlreadyPunchedInError,
    AlreadyPunchedOutError,
    DataAccessError,
    NotOnBreakError,
    NotPunchedInError,
    NotWorkingDayError,
    ValidationError,
)
from ..location.provider import LocationProvider, capture_location
from ..settings.service import SettingsService
from ..sync.dispatcher import ActionDispatcher
from .factory import AttendanceStrategyFactory
from .mapping import break_to_json, punch_to_json, record_from_json, record_to_json
from .model import (
    AttendanceRecord,
    AttendanceSummary,
    BreakSession,
    Location,
    PunchRecord,
    PunchResult,
    TrackingTransition,
)
from .presentation import to_history_row
from .repository import AttendanceRepository
from .summary import build_summary

log = logging.getLogger(__name__)

_RECORD_ACTIONS = (SyncAction.PUNCH_IN, SyncAction.BREAK_START, SyncAction.BREAK_END, SyncAction.PUNCH_OUT)


class IdleTimeSource(Protocol):
    def settle_idle_time(self, employee_id: str, *, now: datetime) -> Optional[int]:
        """Close any open idle session and return paused idle minutes.

        None means the source does not track this employee.
        """

        raise NotImplementedError

    def paused_idle_minutes(self, employee_id: str, *, now: datetime) -> Optional[int]:
        """Paused idle minutes so far, open session included, without closing it."""

        raise NotImplementedError


class AttendanceTrackingService:
    """Punch in/out and break lifecycle for the employees on this device.

    The latest record is cached per employee. With nothing cached, actions
    still waiting in the sync queue are replayed before the server is asked,
    so a restart does not forget an undelivered punch. Every write goes
    through the dispatcher, and the cache is updated only after the
    dispatcher accepted the action (delivered or queued), so a failed
    delivery leaves the record as it was.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        settings: SettingsService,
        dispatcher: ActionDispatcher,
        *,
        location_provider: LocationProvider | None = None,
        location_timeout: float = DEFAULT_GEOLOCATION_TIMEOUT_SECONDS,
        idle_source: IdleTimeSource | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        device_info: str = "worktime-agent",
        id_factory: Callable[[], str] | None = None,
    ):
        self._records = records
        self._settings = settings
        self._dispatcher = dispatcher
        self._location_provider = location_provider
        self._location_timeout = float(location_timeout)
        self._idle_source = idle_source
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._device_info = device_info
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)

        self._latest: Dict[str, AttendanceRecord] = {}
        self._open_breaks: Dict[str, BreakSession] = {}
        self._guard = SingleFlight()

        self.transitions: EventChannel[TrackingTransition] = EventChannel("attendance.transitions")

    def _from_queue(self, employee_id: str) -> Optional[AttendanceRecord]:
        # Newest undelivered record wins; the server has not seen it yet.
        for item in reversed(self._dispatcher.queued_items()):
            if item.action not in _RECORD_ACTIONS:
                continue
            data = item.payload.get("record") or {}
            if str(data.get("employeeId")) != employee_id:
                continue

            record = record_from_json(data)
            opened = item.payload.get("breakSession")
            if item.action == SyncAction.BREAK_START and opened and record.break_started_at is not None:
                self._open_breaks[employee_id] = BreakSession(
                    session_id=str(opened["id"]),
                    record_id=record.record_id,
                    employee_id=employee_id,
                    start_time=record.break_started_at,
                )
            log.info("Restored %s record %s from the sync queue", employee_id, record.record_id)
            return record
        return None

    def _latest_known(self, employee_id: str) -> Optional[AttendanceRecord]:
        cached = self._latest.get(employee_id)
        if cached:
            return cached
        queued = self._from_queue(employee_id)
        if queued:
            self._latest[employee_id] = queued
        return queued

    def _fetch(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        try:
            return self._records.get_for_employee_and_date(employee_id, day)
        except DataAccessError:
            if self._dispatcher.is_online():
                raise
            log.info("Offline and nothing known for %s on %s", employee_id, day)
            return None

    def _load_today(self, employee_id: str, today: date) -> Optional[AttendanceRecord]:
        known = self._latest_known(employee_id)
        if known and known.work_date == today:
            return known

        record = self._fetch(employee_id, today)
        if record:
            self._latest[employee_id] = record
        return record

    def _find_current(self, employee_id: str, now: datetime) -> Optional[AttendanceRecord]:
        """The open record whatever its date, otherwise today's record.

        A shift that crosses midnight keeps its record open on the next day.
        """

        known = self._latest_known(employee_id)
        if known and known.is_open:
            return known

        today = now.date()
        record = self._load_today(employee_id, today)
        if record is None:
            previous = self._fetch(employee_id, today - timedelta(days=1))
            if previous and previous.is_open:
                self._latest[employee_id] = previous
                return previous
        return record

    def _require_open(self, employee_id: str, now: datetime) -> AttendanceRecord:
        record = self._find_current(employee_id, now)
        if not record or record.punch_in_time is None:
            raise NotPunchedInError("No open punch in record found")
        if record.punch_out_time is not None:
            raise AlreadyPunchedOutError("Already punched out today")
        return record

    def _punch(
        self,
        *,
        employee_id: str,
        record_id: str,
        punch_type: PunchType,
        now: datetime,
        location: Optional[Location],
        is_manual: bool,
        notes: Optional[str],
    ) -> PunchRecord:
        if location is None:
            location = capture_location(self._location_provider, timeout=self._location_timeout)
        return PunchRecord(
            punch_id=self._new_id(),
            employee_id=employee_id,
            record_id=record_id,
            punch_type=punch_type,
            punch_time=now,
            device_info=self._device_info,
            is_manual=is_manual,
            location=location,
            notes=notes,
        )

    def _commit(self, record: AttendanceRecord, state: TrackingState, now: datetime) -> None:
        self._latest[record.employee_id] = record
        self.transitions.publish(TrackingTransition(employee_id=record.employee_id, state=state, at=now))

    def punch_in(
        self,
        employee_id: str,
        *,
        location: Location | None = None,
        notes: str | None = None,
        is_manual: bool = False,
        now: datetime | None = None,
    ) -> PunchResult:
        now = now or now_local()
        today = now.date()

        with self._guard.hold(employee_id):
            existing = self._find_current(employee_id, now)
            if existing and existing.is_open:
                raise AlreadyPunchedInError("Already punched in, punch out first")
            if existing and existing.work_date != today:
                existing = None
            if existing and existing.punch_in_time is not None:
                raise AlreadyPunchedInError("Already punched in today")

            settings = self._settings.get_settings(employee_id)
            if not is_working_day(today, settings.working_days):
                raise NotWorkingDayError("Today is not a working day")

            strategy = self._factory.for_punch_in(now=now, today=today, settings=settings)
            decision = strategy.decide_punch_in(now=now, today=today, settings=settings)

            record = AttendanceRecord(
                record_id=existing.record_id if existing else self._new_id(),
                employee_id=employee_id,
                work_date=today,
                status=decision.status,
                punch_in_time=now,
                late_minutes=decision.late_minutes,
                notes=notes,
            )
            punch = self._punch(
                employee_id=employee_id,
                record_id=record.record_id,
                punch_type=PunchType.IN,
                now=now,
                location=location,
                is_manual=is_manual,
                notes=notes,
            )
            if punch.location is None and settings.require_location:
                log.warning("Punch in for %s recorded without a location", employee_id)

            result = self._dispatcher.submit(
                SyncAction.PUNCH_IN,
                {"record": record_to_json(record), "punch": punch_to_json(punch)},
                now=now,
            )
            self._commit(record, TrackingState.PUNCHED_IN, now)

        log.info("Employee %s punched in at %s (%s)", employee_id, now.isoformat(), record.status.value)
        return PunchResult(
            record=record,
            punch=punch,
            is_late=record.status == AttendanceStatus.LATE,
            queued=result.queued,
        )

    def punch_out(
        self,
        employee_id: str,
        *,
        location: Location | None = None,
        notes: str | None = None,
        is_manual: bool = False,
        now: datetime | None = None,
    ) -> PunchResult:
        now = now or now_local()

        with self._guard.hold(employee_id):
            record = self._require_open(employee_id, now)
            if now < record.punch_in_time:
                raise ValidationError("Punch out time cannot be before punch in time")
            settings = self._settings.get_settings(employee_id)

            break_total = record.total_break_time
            closed_break = None
            if record.break_started_at is not None:
                closed_break = self._close_break(record, now)
                break_total += closed_break.duration_minutes or 0

            idle_minutes = record.total_idle_time
            if self._idle_source is not None:
                settled = self._idle_source.settle_idle_time(employee_id, now=now)
                if settled is not None:
                    idle_minutes = settled

            gross_minutes = (now - record.punch_in_time).total_seconds() / 60
            worked_hours = round(max(0.0, gross_minutes - break_total - idle_minutes) / 60, 2)
            overtime_hours = round(max(0.0, worked_hours - settings.overtime_threshold), 2)

            work_end = datetime.combine(record.work_date, settings.end)
            early_leave_minutes = None
            if now < work_end - timedelta(minutes=settings.early_leave_threshold):
                early_leave_minutes = whole_minutes_between(now, work_end)

            strategy = self._factory.for_punch_out(worked_hours=worked_hours, settings=settings)
            decision = strategy.decide_punch_out(worked_hours=worked_hours, settings=settings, current=record.status)

            updated = replace(
                record,
                punch_out_time=now,
                status=decision.status,
                total_working_hours=worked_hours,
                total_break_time=break_total,
                total_idle_time=idle_minutes,
                overtime_hours=overtime_hours,
                early_leave_minutes=early_leave_minutes,
                break_started_at=None,
                notes=notes or record.notes,
            )
            punch = self._punch(
                employee_id=employee_id,
                record_id=record.record_id,
                punch_type=PunchType.OUT,
                now=now,
                location=location,
                is_manual=is_manual,
                notes=notes,
            )

            result = self._dispatcher.submit(
                SyncAction.PUNCH_OUT,
                {
                    "record": record_to_json(updated),
                    "punch": punch_to_json(punch),
                    "breakSession": break_to_json(closed_break) if closed_break else None,
                },
                now=now,
            )
            self._open_breaks.pop(employee_id, None)
            self._commit(updated, TrackingState.PUNCHED_OUT, now)

        log.info("Employee %s punched out at %s after %.2fh", employee_id, now.isoformat(), worked_hours)
        return PunchResult(
            record=updated,
            punch=punch,
            is_late=updated.status == AttendanceStatus.LATE,
            queued=result.queued,
        )

    def _close_break(self, record: AttendanceRecord, now: datetime) -> BreakSession:
        opened = self._open_breaks.get(record.employee_id)
        return BreakSession(
            session_id=opened.session_id if opened else self._new_id(),
            record_id=record.record_id,
            employee_id=record.employee_id,
            start_time=record.break_started_at,
            end_time=now,
            duration_minutes=whole_minutes_between(record.break_started_at, now),
        )

    def start_break(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()

        with self._guard.hold(employee_id):
            record = self._require_open(employee_id, now)
            if record.break_started_at is not None:
                raise AlreadyOnBreakError("Already on a break")

            session = BreakSession(
                session_id=self._new_id(),
                record_id=record.record_id,
                employee_id=employee_id,
                start_time=now,
            )
            updated = replace(record, break_started_at=now)
            self._dispatcher.submit(
                SyncAction.BREAK_START,
                {"record": record_to_json(updated), "breakSession": break_to_json(session)},
                now=now,
            )
            self._open_breaks[employee_id] = session
            self._commit(updated, TrackingState.ON_BREAK, now)

        log.info("Employee %s started a break", employee_id)
        return updated

    def end_break(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()

        with self._guard.hold(employee_id):
            record = self._require_open(employee_id, now)
            if record.break_started_at is None:
                raise NotOnBreakError("Not on a break")

            session = self._close_break(record, now)
            updated = replace(
                record,
                break_started_at=None,
                total_break_time=record.total_break_time + (session.duration_minutes or 0),
            )
            self._dispatcher.submit(
                SyncAction.BREAK_END,
                {"record": record_to_json(updated), "breakSession": break_to_json(session)},
                now=now,
            )
            self._open_breaks.pop(employee_id, None)
            self._commit(updated, TrackingState.PUNCHED_IN, now)

        log.info("Employee %s ended a %d minute break", employee_id, session.duration_minutes or 0)
        return updated

    def get_today_record(self, employee_id: str, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        """Today's record, or the still open one from the day before."""

        now = now or now_local()
        return self._find_current(employee_id, now)

    def get_tracking_state(self, employee_id: str, *, now: datetime | None = None) -> TrackingState:
        record = self.get_today_record(employee_id, now=now)
        return record.tracking_state if record else TrackingState.NOT_STARTED

    def get_current_status(self, employee_id: str, *, now: datetime | None = None) -> dict:
        """Snapshot for the UI; working hours run live while punched in."""

        now = now or now_local()
        record = self.get_today_record(employee_id, now=now)
        if not record or record.punch_in_time is None:
            return {
                "state": TrackingState.NOT_STARTED.value,
                "is_punched_in": False,
                "punch_in_time": None,
                "working_hours": 0.0,
                "status": None,
            }

        if record.punch_out_time is not None:
            working_hours = record.total_working_hours
        else:
            break_minutes = record.total_break_time
            if record.break_started_at is not None:
                break_minutes += whole_minutes_between(record.break_started_at, now)
            idle_minutes = record.total_idle_time
            if self._idle_source is not None:
                paused = self._idle_source.paused_idle_minutes(employee_id, now=now)
                if paused is not None:
                    idle_minutes = paused
            gross = (now - record.punch_in_time).total_seconds() / 60
            working_hours = round(max(0.0, gross - break_minutes - idle_minutes) / 60, 2)

        return {
            "state": record.tracking_state.value,
            "is_punched_in": record.is_open,
            "punch_in_time": record.punch_in_time,
            "working_hours": working_hours,
            "status": record.status.value,
        }

    def get_attendance_summary(self, employee_id: str, *, start_date: date, end_date: date) -> AttendanceSummary:
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        settings = self._settings.get_settings(employee_id)
        records = self._records.list_for_employee(employee_id, start_date=start_date, end_date=end_date)
        return build_summary(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            records=records,
            total_working_days=count_working_days(start_date, end_date, settings.working_days),
        )

    def get_history(self, employee_id: str, *, days: int = 15, now: datetime | None = None) -> List[dict]:
        if days <= 0:
            raise ValidationError("days must be positive")
        today = (now or now_local()).date()
        start = today - timedelta(days=days - 1)
        records = self._records.list_for_employee(employee_id, start_date=start, end_date=today)
        ordered = sorted(records, key=lambda r: r.work_date, reverse=True)
        return [to_history_row(r) for r in ordered]
