from __future__ import annotations

from datetime import datetime

from flask import Flask, request

from ..common.datetime_utils import day_bounds, parse_iso_date
from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    login_required,
    request_json,
    result_response,
)
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..core.result import OperationResult


def register(app: Flask, container: Container) -> None:
    service = container.time_log_service

    @app.route("/api/time-logs/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        return result_response(service.clock_in(current_user_id()), created=True)

    @app.route("/api/time-logs/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        data = request_json()
        result = service.clock_out(
            current_user_id(),
            discard_overtime=bool(data.get("discard_overtime", False)),
            overtime_note=data.get("overtime_note"),
        )
        return result_response(result)

    @app.route("/api/time-logs", methods=["GET"], endpoint="my_time_logs")
    @login_required
    def my_time_logs():
        user_id = current_user_id()
        if current_role() == Role.ADMIN and request.args.get("user_id"):
            user_id = request.args.get("user_id", type=int) or 0

        try:
            start = _date_arg("start")
            end = _date_arg("end", end_of_day=True)
        except ValidationError as e:
            return result_response(OperationResult.fail(e))
        return result_response(service.logs_for_user(user_id, start=start, end=end))

    @app.route("/api/time-logs/today", methods=["GET"], endpoint="today_time_logs")
    @login_required
    def today_time_logs():
        return result_response(service.today_logs(current_user_id()))

    @app.route("/api/admin/overtime", methods=["GET"], endpoint="pending_overtime")
    @admin_required
    def pending_overtime():
        return result_response(service.pending_overtime())

    @app.route("/api/admin/overtime/<int:log_id>", methods=["POST"], endpoint="decide_overtime")
    @admin_required
    def decide_overtime(log_id: int):
        data = request_json()
        result = service.decide_overtime(
            log_id,
            str(data.get("status") or ""),
            current_user_id(),
            current_role=current_role(),
        )
        return result_response(result)


def _date_arg(name: str, *, end_of_day: bool = False) -> datetime | None:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        start, end = day_bounds(parse_iso_date(value))
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")
    return end if end_of_day else start
