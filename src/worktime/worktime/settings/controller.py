from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_endpoint, ok, request_employee_id
from ..container import Container
from .mapping import settings_changes_from_json, settings_to_json


def register(app: Flask, container: Container) -> None:
    service = container.settings_service

    @app.route("/api/tracker/settings", methods=["GET"], endpoint="tracker_settings")
    @json_endpoint
    def get_settings():
        return ok(settings_to_json(service.get_settings(request_employee_id())))

    @app.route("/api/tracker/settings", methods=["POST"], endpoint="tracker_settings_update")
    @json_endpoint
    def update_settings():
        body = request.get_json(silent=True) or {}
        employee_id = request_employee_id(body)
        updated = service.update_settings(employee_id, **settings_changes_from_json(body))
        return ok(settings_to_json(updated))
