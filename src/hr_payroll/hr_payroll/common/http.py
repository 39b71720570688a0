from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Callable, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    InvalidPeriodTransition,
    MissingSalaryStructure,
    NotFoundError,
    RateTableNotFound,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

PAYROLL_ROLES = frozenset({Role.ADMIN.value, Role.HR.value})

# Most specific first.
_STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidPeriodTransition, 409),
    (MissingSalaryStructure, 422),
    (RateTableNotFound, 422),
)


def jsonable(value: Any) -> Any:
    """Decimal as string, dates as ISO strings, enums as values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [jsonable(v) for v in value]
    return value


def status_for(exc: DomainError) -> int:
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return 400


def api_view(view: Callable) -> Callable:
    """Turn domain errors into JSON error bodies and log anything unexpected."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return jsonify({"success": False, "message": str(e)}), status_for(e)
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"success": False, "message": "Internal server error"}), 500

    return wrapper


def roles_required(*roles: str) -> Callable:
    allowed = frozenset(roles) or PAYROLL_ROLES

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Login required"}), 401
            if session.get("role") not in allowed:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def acting_user_id() -> Optional[int]:
    raw = session.get("user_id")
    return int(raw) if raw is not None else None


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_field(data: dict, name: str) -> Any:
    value = data.get(name)
    if value is None or value == "":
        raise ValidationError(f"{name} is required")
    return value


def date_field(data: dict, name: str, *, required: bool = True) -> Optional[date]:
    raw = data.get(name)
    if raw in (None, ""):
        if required:
            raise ValidationError(f"{name} is required")
        return None
    try:
        return parse_iso_date(str(raw))
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")
