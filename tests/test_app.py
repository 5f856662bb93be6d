from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.internship_tracker.internship_tracker.container import build_services
from src.internship_tracker.internship_tracker.main import create_app

INTERN = {"user_id": 1, "role": "intern"}
ADMIN = {"user_id": 99, "role": "admin"}


@pytest.fixture()
def app(uow, policy, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(build_services(uow=uow, policy=policy))


def _login(client, who):
    with client.session_transaction() as sess:
        sess.update(who)


def test_requires_login(app):
    resp = app.test_client().post("/api/time-logs/clock-in")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_admin_routes_reject_interns(app):
    client = app.test_client()
    _login(client, INTERN)

    assert client.get("/api/admin/edit-requests").status_code == 403


def test_clock_in_twice_conflicts(app):
    client = app.test_client()
    _login(client, INTERN)

    first = client.post("/api/time-logs/clock-in")
    second = client.post("/api/time-logs/clock-in")

    assert first.status_code == 201
    assert first.get_json()["log_type"] == "regular"
    assert second.status_code == 409


def test_edit_request_review_over_http(app, uow):
    log_id = uow.seed_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 16, 0))
    intern = app.test_client()
    admin = app.test_client()
    _login(intern, INTERN)
    _login(admin, ADMIN)

    created = intern.post(
        "/api/edit-requests",
        json={"log_id": log_id, "requested_time_out": "2026-03-02T17:00:00"},
    )
    assert created.status_code == 201
    rid = created.get_json()["request_id"]

    assert admin.post(f"/api/admin/edit-requests/{rid}", json={"action": "bogus"}).status_code == 400
    assert admin.post("/api/admin/edit-requests/4040", json={"action": "approve"}).status_code == 404

    approved = admin.post(f"/api/admin/edit-requests/{rid}", json={"action": "approve"})
    assert approved.status_code == 200
    assert approved.get_json()["status"] == "approved"
    assert uow.store.logs[log_id].time_out == datetime(2026, 3, 2, 17, 0)

    assert admin.post(f"/api/admin/edit-requests/{rid}", json={"action": "reject"}).status_code == 409


def test_bad_timestamp_is_a_validation_error(app, uow):
    log_id = uow.seed_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 16, 0))
    client = app.test_client()
    _login(client, INTERN)

    resp = client.post("/api/edit-requests", json={"log_id": log_id, "requested_time_out": "yesterday"})

    assert resp.status_code == 400
    assert resp.get_json()["error_kind"] == "validation"


def test_utc_timestamp_is_stored_as_local_time(app, uow):
    requested = datetime(2026, 3, 2, 7, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    log_id = uow.seed_log(requested + timedelta(minutes=30), requested + timedelta(hours=8, minutes=30))
    client = app.test_client()
    _login(client, INTERN)

    resp = client.post("/api/edit-requests", json={"log_id": log_id, "requested_time_in": "2026-03-02T07:30:00.000Z"})

    assert resp.status_code == 201
    req = uow.store.edit_requests[resp.get_json()["request_id"]]
    assert req.requested_time_in == requested
    assert req.requested_time_in.tzinfo is None


def test_progress_and_migration_endpoints(app, uow):
    uow.seed_program(required_hours="600")
    uow.seed_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 19, 0))
    intern = app.test_client()
    admin = app.test_client()
    _login(intern, INTERN)
    _login(admin, ADMIN)

    progress = intern.get("/api/progress").get_json()
    assert progress["statistics"]["regular_hours_total"] == 9.0
    assert progress["statistics"]["has_overflow"] is True

    status = admin.get("/api/admin/migration").get_json()
    assert status["needs_migration"] is True

    report = admin.post("/api/admin/migration")
    assert report.status_code == 200
    assert report.get_json()["processed"] == 1
    assert admin.get("/api/admin/migration").get_json()["needs_migration"] is False
