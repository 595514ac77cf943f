from __future__ import annotations

from datetime import date

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.responses import json_endpoint, ok, request_employee_id
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Location
from .presentation import present_status


def _location(body: dict) -> Location | None:
    raw = body.get("location")
    if not raw:
        return None
    try:
        return Location(latitude=float(raw["latitude"]), longitude=float(raw["longitude"]), address=raw.get("address"))
    except (KeyError, TypeError, ValueError):
        raise ValidationError("location needs numeric latitude and longitude")


def _date_arg(name: str, default: date) -> date:
    raw = request.args.get(name)
    if not raw:
        return default
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def _punch_payload(result) -> dict:
    return {
        "record": result.record,
        "punch": result.punch,
        "isLate": result.is_late,
        "queued": result.queued,
        "presentation": present_status(result.record.status),
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/tracker/punch-in", methods=["POST"], endpoint="tracker_punch_in")
    @json_endpoint
    def punch_in():
        body = request.get_json(silent=True) or {}
        result = service.punch_in(
            request_employee_id(body),
            location=_location(body),
            notes=body.get("notes"),
            is_manual=bool(body.get("isManual", False)),
        )
        return ok(_punch_payload(result), 201)

    @app.route("/api/tracker/punch-out", methods=["POST"], endpoint="tracker_punch_out")
    @json_endpoint
    def punch_out():
        body = request.get_json(silent=True) or {}
        result = service.punch_out(
            request_employee_id(body),
            location=_location(body),
            notes=body.get("notes"),
            is_manual=bool(body.get("isManual", False)),
        )
        return ok(_punch_payload(result))

    @app.route("/api/tracker/break/start", methods=["POST"], endpoint="tracker_break_start")
    @json_endpoint
    def break_start():
        body = request.get_json(silent=True) or {}
        return ok(service.start_break(request_employee_id(body)))

    @app.route("/api/tracker/break/end", methods=["POST"], endpoint="tracker_break_end")
    @json_endpoint
    def break_end():
        body = request.get_json(silent=True) or {}
        return ok(service.end_break(request_employee_id(body)))

    @app.route("/api/tracker/status", methods=["GET"], endpoint="tracker_status")
    @json_endpoint
    def status():
        employee_id = request_employee_id()
        data = service.get_current_status(employee_id)
        data["presentation"] = present_status(data["status"]) if data["status"] else None
        return ok(data)

    @app.route("/api/tracker/summary", methods=["GET"], endpoint="tracker_summary")
    @json_endpoint
    def summary():
        today = now_local().date()
        start = _date_arg("start", today.replace(day=1))
        end = _date_arg("end", today)
        return ok(service.get_attendance_summary(request_employee_id(), start_date=start, end_date=end))

    @app.route("/api/tracker/history", methods=["GET"], endpoint="tracker_history")
    @json_endpoint
    def history():
        try:
            days = int(request.args.get("days", 15))
        except ValueError:
            raise ValidationError("days must be a number")
        return ok(service.get_history(request_employee_id(), days=days))
