from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_endpoint, ok, request_employee_id
from ..container import Container
from .mapping import idle_settings_changes_from_json, idle_settings_to_json


def register(app: Flask, container: Container) -> None:
    service = container.idle_service

    @app.route("/api/tracker/idle", methods=["GET"], endpoint="tracker_idle_state")
    @json_endpoint
    def idle_state():
        # The UI polls this endpoint, so it doubles as the sampling step.
        return ok(service.poll())

    @app.route("/api/tracker/idle/activity", methods=["POST"], endpoint="tracker_idle_activity")
    @json_endpoint
    def idle_activity():
        return ok(service.record_activity())

    @app.route("/api/tracker/idle/start", methods=["POST"], endpoint="tracker_idle_start")
    @json_endpoint
    def idle_start():
        body = request.get_json(silent=True) or {}
        return ok(service.manual_start_idle(notes=body.get("notes") or body.get("reason")))

    @app.route("/api/tracker/idle/end", methods=["POST"], endpoint="tracker_idle_end")
    @json_endpoint
    def idle_end():
        return ok(service.manual_end_idle())

    @app.route("/api/tracker/idle/sessions", methods=["GET"], endpoint="tracker_idle_sessions")
    @json_endpoint
    def idle_sessions():
        return ok(service.get_idle_sessions())

    @app.route("/api/tracker/idle/settings", methods=["POST"], endpoint="tracker_idle_settings")
    @json_endpoint
    def idle_settings():
        body = request.get_json(silent=True) or {}
        updated = service.update_settings(**idle_settings_changes_from_json(body))
        return ok(idle_settings_to_json(updated))

    @app.route("/api/tracker/idle/monitor", methods=["POST"], endpoint="tracker_idle_monitor")
    @json_endpoint
    def idle_monitor():
        body = request.get_json(silent=True) or {}
        if body.get("enabled", True):
            return ok(service.start_monitoring(request_employee_id(body)))
        return ok(service.stop_monitoring())
