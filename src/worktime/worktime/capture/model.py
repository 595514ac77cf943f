from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ScreenCapture:
    capture_id: str
    employee_id: str
    timestamp: datetime
    content_type: str
    file_size: int
    image_data: str  # base64
    record_id: Optional[str] = None
    is_active: bool = True
