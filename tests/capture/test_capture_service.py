from __future__ import annotations

import base64
from datetime import datetime

import pytest

from src.worktime.worktime.capture.service import MAX_CAPTURE_BYTES
from src.worktime.worktime.core.enums import SyncAction
from src.worktime.worktime.core.exceptions import ValidationError

T0 = datetime(2025, 1, 6, 10, 0)


def test_capture_is_sent_as_base64(make_services):
    s = make_services()

    result = s.capture.submit_capture("emp-1", b"png-bytes", content_type="IMAGE/PNG", record_id="rec-1", now=T0)

    assert result.queued is False
    action, payload = s.transport.delivered[0]
    assert action == SyncAction.SCREEN_CAPTURE
    assert base64.b64decode(payload["imageData"]) == b"png-bytes"
    assert payload["fileSize"] == 9
    assert payload["contentType"] == "image/png"
    assert payload["attendanceRecordId"] == "rec-1"
    assert payload["timestamp"] == T0.isoformat()


def test_capture_is_queued_offline(make_services):
    s = make_services(online=False)

    result = s.capture.submit_capture("emp-1", b"png-bytes", now=T0)

    assert result.queued is True
    assert s.queue.get(result.item_id).action == SyncAction.SCREEN_CAPTURE


def test_capture_is_queued_when_upload_fails(make_services):
    s = make_services(auto_sync=False)
    s.transport.fail_when = lambda action, payload: True

    assert s.capture.submit_capture("emp-1", b"png-bytes", now=T0).queued is True


@pytest.mark.parametrize(
    "image, content_type",
    [(b"", "image/png"), (b"x" * (MAX_CAPTURE_BYTES + 1), "image/png"), (b"gif", "image/gif")],
)
def test_rejected_captures(make_services, image, content_type):
    s = make_services()

    with pytest.raises(ValidationError):
        s.capture.submit_capture("emp-1", image, content_type=content_type, now=T0)

    assert s.transport.attempts == []
