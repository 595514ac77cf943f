from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.enums import SyncAction
from ..core.events import EventChannel
from ..core.exceptions import DataAccessError
from .model import DispatchResult, SyncQueueItem
from .repository import SyncQueueRepository
from .transport import SyncTransport

log = logging.getLogger(__name__)


class Connectivity(Protocol):
    def is_online(self) -> bool:
        raise NotImplementedError


class ActionDispatcher:
    """Single write path for every mutating action.

    Online with an empty queue: the action is delivered right away and a
    delivery failure raises DataAccessError. Otherwise it is appended to the
    queue behind older actions so the server sees them in causal order.
    """

    def __init__(
        self,
        network: Connectivity,
        queue: SyncQueueRepository,
        transport: SyncTransport,
        *,
        id_factory: Callable[[], str] | None = None,
    ):
        self._network = network
        self._queue = queue
        self._transport = transport
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self.queued: EventChannel[SyncQueueItem] = EventChannel("sync.queued")

    def is_online(self) -> bool:
        return self._network.is_online()

    def submit(
        self,
        action: SyncAction,
        payload: Dict[str, Any],
        *,
        now: datetime | None = None,
        queue_on_failure: bool = False,
    ) -> DispatchResult:
        now = now or now_local()

        if self._network.is_online() and self._queue.count() == 0:
            try:
                response = self._transport.deliver(action, payload)
                return DispatchResult(queued=False, response=response)
            except DataAccessError as e:
                if not queue_on_failure:
                    raise
                log.warning("Delivering %s failed, queueing for sync: %s", action.value, e)
                return self.enqueue(action, payload, now=now, last_error=str(e))

        return self.enqueue(action, payload, now=now)

    def enqueue(
        self,
        action: SyncAction,
        payload: Dict[str, Any],
        *,
        now: datetime | None = None,
        last_error: Optional[str] = None,
    ) -> DispatchResult:
        item = SyncQueueItem(
            item_id=self._new_id(),
            action=action,
            payload=payload,
            created_at=now or now_local(),
            last_error=last_error,
        )
        self._queue.append(item)
        log.info("Queued %s for later sync (%s)", action.value, item.item_id)
        self.queued.publish(item)
        return DispatchResult(queued=True, item_id=item.item_id)

    def queued_items(self) -> List[SyncQueueItem]:
        """Actions not yet delivered, oldest first."""

        return list(self._queue.list_items())
