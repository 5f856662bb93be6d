from __future__ import annotations

from flask import Flask

from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    datetime_field,
    login_required,
    request_json,
    result_response,
)
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.result import OperationResult


def register(app: Flask, container: Container) -> None:
    service = container.edit_request_service

    @app.route("/api/edit-requests", methods=["POST"], endpoint="submit_edit_request")
    @login_required
    def submit_edit_request():
        data = request_json()
        try:
            time_in = datetime_field(data, "requested_time_in")
            time_out = datetime_field(data, "requested_time_out")
        except ValidationError as e:
            return result_response(OperationResult.fail(e))

        log_ids = data.get("log_ids") or []
        if isinstance(log_ids, list) and len(log_ids) > 1:
            result = service.submit_continuous(
                requested_by=current_user_id(),
                current_role=current_role(),
                log_ids=log_ids,
                requested_time_in=time_in,
                requested_time_out=time_out,
            )
        else:
            result = service.submit(
                requested_by=current_user_id(),
                current_role=current_role(),
                log_id=data.get("log_id") or (log_ids[0] if log_ids else 0),
                requested_time_in=time_in,
                requested_time_out=time_out,
            )
        return result_response(result, created=True)

    @app.route("/api/edit-requests", methods=["GET"], endpoint="my_edit_requests")
    @login_required
    def my_edit_requests():
        return result_response(service.list_for_user(current_user_id()))

    @app.route("/api/admin/edit-requests", methods=["GET"], endpoint="pending_edit_requests")
    @admin_required
    def pending_edit_requests():
        return result_response(service.list_pending())

    @app.route("/api/admin/edit-requests/<int:request_id>", methods=["POST"], endpoint="review_edit_request")
    @admin_required
    def review_edit_request(request_id: int):
        data = request_json()
        result = service.review(
            request_id=request_id,
            action=str(data.get("action") or ""),
            reviewer_id=current_user_id(),
            current_role=current_role(),
        )
        return result_response(result)

    @app.route("/api/admin/edit-requests/batch", methods=["POST"], endpoint="batch_edit_requests")
    @admin_required
    def batch_edit_requests():
        data = request_json()
        result = service.process_batch(
            request_ids=data.get("request_ids") or [],
            action=str(data.get("action") or ""),
            reviewer_id=current_user_id(),
            current_role=current_role(),
        )
        return result_response(result)
