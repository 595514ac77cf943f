from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..common.datetime_utils import now_local
from ..core.constants import (
    DEFAULT_SYNC_BACKOFF_BASE_SECONDS,
    DEFAULT_SYNC_BACKOFF_MAX_SECONDS,
    DEFAULT_SYNC_INTERVAL_SECONDS,
)
from ..core.enums import SyncItemStatus
from ..core.events import EventChannel
from ..core.exceptions import DataAccessError, ValidationError
from ..network.model import NetworkState
from ..network.service import NetworkDetectionService
from .dispatcher import ActionDispatcher
from .model import SyncProgress, SyncQueueItem, SyncStats
from .repository import SyncQueueRepository
from .transport import SyncTransport

log = logging.getLogger(__name__)

ItemFilter = Callable[[SyncQueueItem, datetime], bool]


class SyncService:
    """Replays queued actions against the server.

    Failure policy is skip-and-continue: an item that fails stays in the
    queue (attempt_count + 1, status failed) and the pass moves on to the
    next one. Automatic passes leave failed items alone until their backoff
    window (base * 2^(attempts-1), capped) has elapsed; `force_sync_now` and
    `retry_failed_items` ignore it.
    """

    def __init__(
        self,
        queue: SyncQueueRepository,
        transport: SyncTransport,
        network: NetworkDetectionService,
        *,
        dispatcher: ActionDispatcher | None = None,
        auto_sync: bool = True,
        backoff_base_seconds: float = DEFAULT_SYNC_BACKOFF_BASE_SECONDS,
        backoff_max_seconds: float = DEFAULT_SYNC_BACKOFF_MAX_SECONDS,
        sync_interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    ):
        self._queue = queue
        self._transport = transport
        self._network = network
        self._auto_sync = bool(auto_sync)
        self._backoff_base = float(backoff_base_seconds)
        self._backoff_max = float(backoff_max_seconds)
        self._interval = float(sync_interval_seconds)

        self._lock = threading.Lock()
        self._is_running = False
        self._progress = SyncProgress()
        self._last_tick: Optional[datetime] = None

        self.progress: EventChannel[SyncProgress] = EventChannel("sync.progress")

        recovered = self._queue.reset_syncing()
        if recovered:
            log.info("Recovered %d item(s) interrupted during a previous sync", recovered)

        network.changes.subscribe(self._on_network_change)
        if dispatcher is not None:
            dispatcher.queued.subscribe(self._on_item_queued)

    @property
    def is_running(self) -> bool:
        return self._is_running

    def set_auto_sync_enabled(self, enabled: bool) -> None:
        self._auto_sync = bool(enabled)
        log.info("Auto sync %s", "enabled" if enabled else "disabled")

    def backoff_delay(self, attempt_count: int) -> timedelta:
        if attempt_count <= 0:
            return timedelta(0)
        seconds = self._backoff_base * (2 ** (attempt_count - 1))
        return timedelta(seconds=min(seconds, self._backoff_max))

    def next_attempt_at(self, item: SyncQueueItem) -> Optional[datetime]:
        if item.status != SyncItemStatus.FAILED or item.last_attempt_at is None:
            return None
        return item.last_attempt_at + self.backoff_delay(item.attempt_count)

    def _due(self, item: SyncQueueItem, now: datetime) -> bool:
        if item.status == SyncItemStatus.PENDING:
            return True
        due_at = self.next_attempt_at(item)
        return due_at is None or now >= due_at

    def sync_offline_data(self, *, now: datetime | None = None) -> SyncProgress:
        """Automatic pass: pending items plus failed items out of backoff."""

        return self._run_pass(self._due, now=now)

    def force_sync_now(self, *, now: datetime | None = None) -> SyncProgress:
        """Manual pass over every queued item, backoff ignored."""

        return self._run_pass(lambda item, _: True, now=now)

    def retry_failed_items(self, *, now: datetime | None = None) -> SyncProgress:
        """Manual re-pass over failed items only. attempt_count keeps growing."""

        return self._run_pass(lambda item, _: item.status == SyncItemStatus.FAILED, now=now)

    def abandon_item(self, item_id: str) -> None:
        item = self._queue.get(item_id)
        if not item:
            raise ValidationError("Queue item not found")
        if item.status != SyncItemStatus.FAILED:
            raise ValidationError("Only failed items can be abandoned")
        self._queue.remove(item_id)
        log.warning("Abandoned %s item %s after %d attempt(s)", item.action.value, item_id, item.attempt_count)

    def tick(self, *, now: datetime | None = None) -> Optional[SyncProgress]:
        """Periodic hook for the host loop; runs an automatic pass when due."""

        now = now or now_local()
        if not self._auto_sync or not self._network.is_online():
            return None
        if self._last_tick and (now - self._last_tick).total_seconds() < self._interval:
            return None
        self._last_tick = now
        if self._queue.count() == 0:
            return None
        return self.sync_offline_data(now=now)

    def get_current_progress(self) -> SyncProgress:
        return self._progress

    def get_queue(self) -> List[SyncQueueItem]:
        return list(self._queue.list_items())

    def get_sync_stats(self) -> SyncStats:
        return SyncStats(
            total_pending=self._queue.count(SyncItemStatus.PENDING),
            total_failed=self._queue.count(SyncItemStatus.FAILED),
            total_synced=self._queue.get_total_synced(),
            last_sync_time=self._queue.get_last_sync_time(),
            is_online=self._network.is_online(),
            can_sync=self._network.can_sync_data(),
        )

    def _on_network_change(self, state: NetworkState) -> None:
        if state.is_online and self._auto_sync:
            log.info("Back online, syncing offline data")
            self.sync_offline_data()

    def _on_item_queued(self, item: SyncQueueItem) -> None:
        # Delivery just failed; the next tick retries it.
        if item.last_error is not None:
            return
        if self._auto_sync and self._network.is_online():
            self.sync_offline_data()

    def _publish(self, progress: SyncProgress) -> None:
        self._progress = progress
        self.progress.publish(progress)

    def _run_pass(self, select: ItemFilter, *, now: datetime | None) -> SyncProgress:
        with self._lock:
            if self._is_running:
                log.info("Sync already in progress")
                return self._progress
            self._is_running = True

        try:
            now = now or now_local()
            if not self._network.is_online():
                log.info("Offline, sync postponed")
                return self._progress

            items = [item for item in self._queue.list_items() if select(item, now)]
            total = len(items)
            synced = 0
            failed = 0
            errors: List[str] = []

            for item in items:
                self._publish(
                    SyncProgress(
                        total_items=total,
                        synced_items=synced,
                        failed_items=failed,
                        is_running=True,
                        errors=tuple(errors),
                        last_sync_time=self._progress.last_sync_time,
                        current_item=f"{item.action.value}:{item.item_id}",
                    )
                )
                error = self._sync_item(item, now)
                if error is None:
                    synced += 1
                else:
                    failed += 1
                    errors.append(error)

            if synced:
                self._queue.record_synced(synced, now=now)
            log.info("Sync pass finished: %d synced, %d failed of %d", synced, failed, total)
            self._publish(
                SyncProgress(
                    total_items=total,
                    synced_items=synced,
                    failed_items=failed,
                    is_running=False,
                    errors=tuple(errors),
                    last_sync_time=now,
                )
            )
            return self._progress
        finally:
            with self._lock:
                self._is_running = False

    def _sync_item(self, item: SyncQueueItem, now: datetime) -> Optional[str]:
        """Deliver one item; returns an error message instead of raising."""

        self._queue.mark_syncing(item.item_id, now=now)
        try:
            self._transport.deliver(item.action, item.payload)
        except DataAccessError as e:
            error = str(e)
            message = f"Failed to sync {item.action.value} ({item.item_id}): {e}"
            log.warning("%s", message)
        except Exception as e:
            error = str(e) or type(e).__name__
            message = f"Failed to sync {item.action.value} ({item.item_id}): {e}"
            log.exception("%s", message)
        else:
            self._queue.remove(item.item_id)
            return None

        self._queue.mark_failed(item.item_id, error=error, now=now)
        return message
