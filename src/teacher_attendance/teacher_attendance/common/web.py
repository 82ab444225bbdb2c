from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import SUPERVISOR_ROLES, AttendanceStatus, RequestStatus, Role
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AuthorizationError,
    DuplicatePendingRequest,
    NotFoundError,
    RequestAlreadyResolved,
    StorageError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

# State conflicts: the request was well-formed but the day/request is not in the right state.
_CONFLICTS = (AlreadyCheckedIn, AlreadyCheckedOut, DuplicatePendingRequest, RequestAlreadyResolved)


def fail(message: str, status: int, *, error: Optional[str] = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if error:
        body["error"] = error
    return jsonify(body), status


def current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def is_supervisor() -> bool:
    return current_role() in SUPERVISOR_ROLES


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def supervisor_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue", 401)
        if not is_supervisor():
            return fail("You do not have permission", 403)
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Translate domain failures into JSON responses; infrastructure errors become 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except NotFoundError as e:
            return fail(str(e), 404, error=type(e).__name__)
        except AuthorizationError as e:
            return fail(str(e), 403, error=type(e).__name__)
        except _CONFLICTS as e:
            return fail(str(e), 409, error=type(e).__name__)
        except ValidationError as e:
            return fail(str(e), 400, error=type(e).__name__)
        except StorageError:
            logger.exception("Storage failure in %s", request.path)
            return fail("System error, please try again later", 500, error="StorageError")
        except Exception:
            logger.exception("Unexpected failure in %s", request.path)
            return fail("System error, please try again later", 500)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    return parse_int(value, field_name)


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    return parse_iso_date(value) if value else None


def parse_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0", "no"}:
        return False
    raise ValidationError(f"{field_name} must be true or false")


def parse_attendance_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")


def parse_request_status(value: Any) -> RequestStatus:
    try:
        return RequestStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown request status: {value!r}")


def resolve_teacher_id(requested: Any) -> int:
    """Teachers act on themselves; supervisors may name any teacher."""
    own = session.get("teacher_id")
    if is_supervisor():
        if requested in (None, ""):
            if own is None:
                raise ValidationError("teacher_id is required")
            return int(own)
        return parse_int(requested, "teacher_id")

    if own is None:
        raise AuthorizationError("Only teachers can record attendance")
    if requested not in (None, "") and parse_int(requested, "teacher_id") != int(own):
        raise AuthorizationError("You can only act on your own attendance")
    return int(own)
