from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    flag_arg,
    login_required,
    request_json,
    result_response,
    to_jsonable,
)
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from ..core.result import OperationResult


def register(app: Flask, container: Container) -> None:
    service = container.completion_service
    migration = container.migration

    @app.route("/api/progress", methods=["GET"], endpoint="progress")
    @login_required
    def progress():
        result = service.progress(current_user_id(), include_edit_requests=flag_arg("include_edit_requests"))
        return result_response(result)

    @app.route("/api/completion/eligibility", methods=["GET"], endpoint="completion_eligibility")
    @login_required
    def completion_eligibility():
        return result_response(service.check_eligibility(current_user_id()))

    @app.route("/api/completion/requests", methods=["POST"], endpoint="request_completion")
    @login_required
    def request_completion():
        return result_response(service.request_completion(current_user_id()), created=True)

    @app.route("/api/admin/completion/requests", methods=["GET"], endpoint="completion_requests")
    @admin_required
    def completion_requests():
        raw = (request.args.get("status") or "").strip().lower()
        try:
            status = RequestStatus(raw) if raw else None
        except ValueError:
            return result_response(OperationResult.fail(ValidationError(f"Invalid status: {raw!r}")))
        return result_response(service.list_requests(status=status))

    @app.route("/api/admin/completion/requests/<int:request_id>", methods=["POST"], endpoint="process_completion")
    @admin_required
    def process_completion(request_id: int):
        data = request_json()
        result = service.process_completion_request(
            request_id,
            str(data.get("action") or ""),
            current_user_id(),
            data.get("admin_notes"),
            current_role=current_role(),
        )
        return result_response(result)

    @app.route(
        "/api/admin/completion/requests/<int:request_id>/time-record",
        methods=["GET"],
        endpoint="completion_time_record",
    )
    @admin_required
    def completion_time_record(request_id: int):
        return result_response(service.time_record_for_request(request_id))

    @app.route("/api/admin/migration", methods=["GET"], endpoint="migration_status")
    @admin_required
    def migration_status():
        logs = migration.find_long_logs()
        return jsonify({"success": True, "needs_migration": bool(logs), "long_logs": to_jsonable(logs)})

    @app.route("/api/admin/migration", methods=["POST"], endpoint="run_migration")
    @admin_required
    def run_migration():
        report = migration.migrate()
        return jsonify(to_jsonable(report)), 200 if report.success else 500
