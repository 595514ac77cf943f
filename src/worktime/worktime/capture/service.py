from __future__ import annotations

import base64
import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local, to_iso
from ..common.validators import require_non_empty
from ..core.enums import SyncAction
from ..core.exceptions import ValidationError
from ..sync.dispatcher import ActionDispatcher
from ..sync.model import DispatchResult
from .model import ScreenCapture

log = logging.getLogger(__name__)

MAX_CAPTURE_BYTES = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/webp"}


def capture_to_json(capture: ScreenCapture) -> dict:
    return {
        "id": capture.capture_id,
        "employeeId": capture.employee_id,
        "attendanceRecordId": capture.record_id,
        "timestamp": to_iso(capture.timestamp),
        "contentType": capture.content_type,
        "fileSize": capture.file_size,
        "imageData": capture.image_data,
        "isActive": capture.is_active,
    }


class ScreenCaptureService:
    """Hands captures taken by the host to the dispatcher.

    Taking the screenshot is the host's job; this service checks what the
    server would reject anyway and queues the rest like any other write.
    """

    def __init__(self, dispatcher: ActionDispatcher, *, id_factory: Callable[[], str] | None = None):
        self._dispatcher = dispatcher
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)

    def submit_capture(
        self,
        employee_id: str,
        image: bytes,
        *,
        content_type: str = "image/png",
        record_id: Optional[str] = None,
        is_active: bool = True,
        now: datetime | None = None,
    ) -> DispatchResult:
        employee_id = require_non_empty(employee_id, "employee_id")
        now = now or now_local()
        if not image:
            raise ValidationError("Capture image is empty")
        if len(image) > MAX_CAPTURE_BYTES:
            raise ValidationError("File size too large. Maximum size is 5MB.")
        content_type = (content_type or "").lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Invalid file type. Only PNG, JPEG, and WebP images are allowed.")

        capture = ScreenCapture(
            capture_id=self._new_id(),
            employee_id=employee_id,
            timestamp=now,
            content_type=content_type,
            file_size=len(image),
            image_data=base64.b64encode(image).decode("ascii"),
            record_id=record_id,
            is_active=is_active,
        )
        result = self._dispatcher.submit(SyncAction.SCREEN_CAPTURE, capture_to_json(capture), now=now, queue_on_failure=True)
        log.info("Screen capture %s for %s %s", capture.capture_id, employee_id, "queued" if result.queued else "sent")
        return result
