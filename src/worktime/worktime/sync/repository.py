from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import SyncItemStatus
from .model import SyncQueueItem


class SyncQueueRepository(Protocol):
    def append(self, item: SyncQueueItem) -> None:
        raise NotImplementedError

    def get(self, item_id: str) -> Optional[SyncQueueItem]:
        raise NotImplementedError

    def list_items(self, statuses: Optional[Sequence[SyncItemStatus]] = None) -> Sequence[SyncQueueItem]:
        """Items in insertion (FIFO) order."""

        raise NotImplementedError

    def count(self, status: Optional[SyncItemStatus] = None) -> int:
        raise NotImplementedError

    def mark_syncing(self, item_id: str, *, now: datetime) -> bool:
        raise NotImplementedError

    def mark_failed(self, item_id: str, *, error: str, now: datetime) -> bool:
        """Increment attempt_count and keep the item for a later pass."""

        raise NotImplementedError

    def remove(self, item_id: str) -> bool:
        raise NotImplementedError

    def reset_syncing(self) -> int:
        """Return items left in 'syncing' by an interrupted pass to 'pending'."""

        raise NotImplementedError

    def record_synced(self, count: int, *, now: datetime) -> None:
        raise NotImplementedError

    def get_total_synced(self) -> int:
        raise NotImplementedError

    def get_last_sync_time(self) -> Optional[datetime]:
        raise NotImplementedError
