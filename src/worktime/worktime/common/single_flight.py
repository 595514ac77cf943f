from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator, Set

from ..core.exceptions import PunchInProgressError


class SingleFlight:
    """At most one in-flight operation per key; a second caller fails fast."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._busy: Set[Hashable] = set()

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._lock:
            if key in self._busy:
                raise PunchInProgressError("Another request for this employee is still in progress")
            self._busy.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._busy.discard(key)

    def is_busy(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._busy
