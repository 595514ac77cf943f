from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .model import IdleSettings


class DetectorSignal(str, Enum):
    NONE = "none"
    WARNING = "warning"
    IDLE = "idle"


class InactivityDetector:
    """Sampling inactivity timer.

    The host reports activity with `record_activity` and calls `poll`
    periodically; `poll` says when the warning is due (once per countdown)
    and when the idle threshold has been crossed (once per idle period).
    """

    def __init__(self, settings: IdleSettings):
        self.settings = settings
        self._running = False
        self._last_activity: Optional[datetime] = None
        self._warned = False
        self._idle_since: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_activity(self) -> Optional[datetime]:
        return self._last_activity

    @property
    def idle_since(self) -> Optional[datetime]:
        return self._idle_since

    @property
    def warning_active(self) -> bool:
        return self._warned and self._idle_since is None

    def _threshold(self) -> timedelta:
        return timedelta(minutes=self.settings.idle_threshold_minutes)

    def _warning_lead(self) -> timedelta:
        return timedelta(minutes=self.settings.warning_time_minutes)

    def start(self, now: datetime) -> None:
        self._running = True
        self.reset(now)

    def stop(self) -> None:
        self._running = False
        self._warned = False
        self._idle_since = None

    def reset(self, now: datetime) -> None:
        self._last_activity = now
        self._warned = False
        self._idle_since = None

    def record_activity(self, now: datetime) -> bool:
        """Returns True when this activity interrupts a detected idle period."""

        was_idle = self._idle_since is not None
        self._last_activity = now
        self._warned = False
        return was_idle

    def end_idle(self, now: datetime) -> None:
        self.reset(now)

    def deadline(self) -> Optional[datetime]:
        if self._last_activity is None:
            return None
        return self._last_activity + self._threshold()

    def poll(self, now: datetime) -> DetectorSignal:
        if not self._running or self._idle_since is not None or self._last_activity is None:
            return DetectorSignal.NONE

        deadline = self.deadline()
        if now >= deadline:
            self._idle_since = deadline
            return DetectorSignal.IDLE

        lead = self._warning_lead()
        if (
            self.settings.show_idle_warning
            and lead > timedelta(0)
            and not self._warned
            and now >= deadline - lead
        ):
            self._warned = True
            return DetectorSignal.WARNING
        return DetectorSignal.NONE
