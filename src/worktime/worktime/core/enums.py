from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Daily attendance status stored on the server."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"


class TrackingState(str, Enum):
    """Per-employee, per-day punch lifecycle."""

    NOT_STARTED = "not_started"
    PUNCHED_IN = "punched_in"
    ON_BREAK = "on_break"
    PUNCHED_OUT = "punched_out"


class PunchType(str, Enum):
    IN = "in"
    OUT = "out"


class IdleReason(str, Enum):
    INACTIVITY = "inactivity"
    MANUAL = "manual"


class SyncAction(str, Enum):
    """Mutating actions that may be deferred while offline."""

    PUNCH_IN = "punch_in"
    PUNCH_OUT = "punch_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"
    IDLE_START = "idle_start"
    IDLE_END = "idle_end"
    SETTINGS_UPDATE = "settings_update"
    IDLE_SETTINGS_UPDATE = "idle_settings_update"
    SCREEN_CAPTURE = "screen_capture"


class SyncItemStatus(str, Enum):
    PENDING = "pending"
    SYNCING = "syncing"
    FAILED = "failed"


class ConnectionQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    UNKNOWN = "unknown"
