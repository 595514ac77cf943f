from __future__ import annotations

import base64
import binascii

from flask import Flask, request

from ..common.responses import json_endpoint, ok, request_employee_id
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.capture_service

    @app.route("/api/tracker/captures", methods=["POST"], endpoint="tracker_capture_submit")
    @json_endpoint
    def submit_capture():
        body = request.get_json(silent=True) or {}
        try:
            image = base64.b64decode(body.get("imageData") or "", validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("imageData must be base64")
        result = service.submit_capture(
            request_employee_id(body),
            image,
            content_type=body.get("contentType") or "image/png",
            record_id=body.get("attendanceRecordId"),
            is_active=bool(body.get("isActive", True)),
        )
        return ok({"queued": result.queued, "itemId": result.item_id}, 201)
