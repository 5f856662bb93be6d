from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.result import OperationResult
from .datetime_utils import parse_iso_datetime

HTTP_STATUS = {
    "validation": 400,
    "domain": 400,
    "authorization": 403,
    "not_found": 404,
    "conflict": 409,
    "internal": 500,
}


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Login required", "error_kind": "authentication"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Login required", "error_kind": "authentication"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "error": "Forbidden", "error_kind": "authorization"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.INTERN


def request_json() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def datetime_field(data: dict, name: str) -> Optional[datetime]:
    return parse_iso_datetime(data.get(name), name)


def flag_arg(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}


def to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def result_response(result: OperationResult, *, created: bool = False):
    if not result.success:
        body = {"success": False, "error": result.error, "error_kind": result.error_kind}
        return jsonify(body), HTTP_STATUS.get(result.error_kind or "", 400)
    body = {"success": True, **to_jsonable(result.data)}
    return jsonify(body), 201 if created else 200
