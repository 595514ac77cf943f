from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import current_app, jsonify, request

from ..core.exceptions import DataAccessError, DomainError, PunchInProgressError, StateViolationError, ValidationError

log = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Dataclasses/enums/dates -> plain JSON types (ISO timestamps)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    return value


def request_employee_id(body: dict | None = None) -> str:
    """employeeId from the body, the query string, or the agent default."""

    body = body or {}
    employee_id = body.get("employeeId") or request.args.get("employeeId") or current_app.config.get("EMPLOYEE_ID")
    if not employee_id:
        raise ValidationError("employeeId is required")
    return str(employee_id)


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": to_jsonable(data)}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def json_endpoint(view):
    """Turn service errors into `{success: false, error}` responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except (StateViolationError, PunchInProgressError) as e:
            return fail(str(e), 409)
        except DomainError as e:
            return fail(str(e), 400)
        except DataAccessError as e:
            return fail(str(e), 503)
        except Exception:
            log.exception("Unhandled error in %s", view.__name__)
            return fail("Internal server error", 500)

    return wrapper
