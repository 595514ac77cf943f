from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class NetworkState:
    is_online: bool
    connection_type: str = "unknown"
    last_online_time: Optional[datetime] = None
    last_offline_time: Optional[datetime] = None
    offline_duration_seconds: Optional[float] = None
