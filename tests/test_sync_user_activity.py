from unittest.mock import patch

import pytest

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from crmsync.database import db
from crmsync.models import UserActivity

from tests.conftest import make_settings

ACTIVITY = {
    "login_count": 5,
    "subscription_days_left": 10,
    "daily_time_spent": 120,
    "total_time_spent": 3600,
}


def _count_rows():
    return db.session.execute(select(func.count(UserActivity.id))).scalar_one()


def test_upsert_returns_written_row(client, make_user):
    make_user(email="a@x.com", user_id="u1")

    resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": ACTIVITY})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "User activity synced successfully"
    assert body["data"]["user_id"] == "u1"
    assert body["data"]["login_count"] == 5
    assert body["data"]["total_time_spent"] == 3600
    assert body["data"]["last_active"] is not None


def test_second_sync_keeps_one_row_with_latest_values(client, make_user):
    make_user(email="a@x.com", user_id="u1")

    client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": ACTIVITY})
    updated = dict(ACTIVITY, login_count=6, last_active="2024-02-01T10:00:00Z")
    resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": updated})

    assert resp.status_code == 200
    assert _count_rows() == 1
    db.session.expire_all()
    row = db.session.execute(select(UserActivity)).scalar_one()
    assert row.login_count == 6
    assert row.last_active.isoformat() == "2024-02-01T10:00:00"


def test_email_lookup_is_case_insensitive(client, make_user):
    make_user(email="a@x.com", user_id="u1")

    resp = client.post("/sync-user-activity", json={"email": "  A@X.com ", "activityData": ACTIVITY})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["user_id"] == "u1"


def test_unknown_email_fails_and_writes_nothing(client, make_user):
    make_user(email="a@x.com", user_id="u1")

    resp = client.post("/sync-user-activity", json={"email": "ghost@x.com", "activityData": ACTIVITY})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "User not found"}
    assert _count_rows() == 0


def test_activity_data_must_be_an_object(client, make_user):
    make_user(email="a@x.com")

    resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": [1, 2]})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "activityData must be an object"
    assert _count_rows() == 0


def test_non_numeric_field_is_rejected(client, make_user):
    make_user(email="a@x.com")
    bad = dict(ACTIVITY, login_count="many")

    resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": bad})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "activityData.login_count must be a number"


def test_invalid_json_body(client):
    resp = client.post("/sync-user-activity", data="not json", content_type="application/json")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Request body must be valid JSON"


def test_store_failure_is_sanitized(client, make_user):
    make_user(email="a@x.com")
    boom = OperationalError("INSERT ...", {}, Exception("connection refused on 10.0.0.5"))

    with patch.object(db.session, "commit", side_effect=boom):
        resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": ACTIVITY})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Failed to sync user activity"}


def test_unexpected_error_returns_500(client, make_user):
    make_user(email="a@x.com")

    with patch("crmsync.routes.sync.upsert_user_activity", side_effect=RuntimeError("secret detail")):
        resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": ACTIVITY})

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}


def test_raw_messages_when_details_exposed():
    from crmsync import create_app

    app = create_app(make_settings(expose_error_details=True))
    with app.app_context():
        client = app.test_client()
        resp = client.post("/sync-user-activity", json={"email": "ghost@x.com", "activityData": ACTIVITY})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "User not found: ghost@x.com"}

        with patch("crmsync.routes.sync.resolve_user_id", side_effect=RuntimeError("secret detail")):
            resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": ACTIVITY})
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "secret detail"}
        db.session.remove()


@pytest.mark.parametrize(
    "raw, field",
    [
        ('{"login_count": 1e999}', "login_count"),
        ('{"total_time_spent": -1e999}', "total_time_spent"),
        ('{"daily_time_spent": "1e999"}', "daily_time_spent"),
        ('{"login_count": 1000000000000000000000000000000}', "login_count"),
        ('{"subscription_days_left": 2147483648}', "subscription_days_left"),
    ],
)
def test_out_of_range_numbers_are_rejected(client, make_user, raw, field):
    make_user(email="a@x.com")
    body = '{"email": "a@x.com", "activityData": %s}' % raw

    resp = client.post("/sync-user-activity", data=body, content_type="application/json")

    assert resp.status_code == 400
    assert resp.get_json() == {"error": f"activityData.{field} must be a number"}
    assert _count_rows() == 0


def test_largest_integer_is_accepted(client, make_user):
    make_user(email="a@x.com")

    resp = client.post(
        "/sync-user-activity",
        json={"email": "a@x.com", "activityData": {"total_time_spent": 2147483647}},
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["total_time_spent"] == 2147483647
