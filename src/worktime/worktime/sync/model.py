from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..core.enums import SyncAction, SyncItemStatus


@dataclass(frozen=True)
class SyncQueueItem:
    """One action performed offline, waiting for delivery."""

    item_id: str
    action: SyncAction
    payload: Dict[str, Any]
    created_at: datetime
    attempt_count: int = 0
    last_error: Optional[str] = None
    status: SyncItemStatus = SyncItemStatus.PENDING
    last_attempt_at: Optional[datetime] = None


@dataclass(frozen=True)
class SyncProgress:
    total_items: int = 0
    synced_items: int = 0
    failed_items: int = 0
    is_running: bool = False
    errors: Tuple[str, ...] = field(default_factory=tuple)
    last_sync_time: Optional[datetime] = None
    current_item: Optional[str] = None


@dataclass(frozen=True)
class SyncStats:
    total_pending: int
    total_failed: int
    total_synced: int
    last_sync_time: Optional[datetime]
    is_online: bool
    can_sync: bool


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a write: delivered now, or queued for a later sync pass."""

    queued: bool
    item_id: Optional[str] = None
    response: Any = None
