from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

Handler = Callable[[T], None]
Unsubscribe = Callable[[], None]


class EventChannel(Generic[T]):
    """Synchronous publish/subscribe channel.

    Handlers run in subscription order on the publishing thread, once per
    published event. A failing handler is logged and does not stop the
    others from being called.
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: list[Handler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler) -> Unsubscribe:
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: T) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                log.exception("Error in %s handler", self.name)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)
