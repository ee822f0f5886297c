import pytest

from tests.conftest import make_settings


@pytest.fixture
def settings():
    return make_settings(service_role_key="svc-key")


def test_missing_key_is_rejected(client, make_user):
    make_user(email="a@x.com")

    resp = client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": {}})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid service credentials"}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_wrong_key_is_rejected(client):
    resp = client.post("/check-trial-status", headers={"Authorization": "Bearer nope"})

    assert resp.status_code == 401


@pytest.mark.parametrize(
    "headers",
    [{"Authorization": "Bearer svc-key"}, {"apikey": "svc-key"}],
)
def test_key_accepted(client, make_user, headers):
    make_user(email="a@x.com")

    resp = client.post(
        "/sync-user-activity",
        json={"email": "a@x.com", "activityData": {"login_count": 2}},
        headers=headers,
    )

    assert resp.status_code == 200


def test_preflight_needs_no_key(client):
    resp = client.options("/sync-activity-logs")

    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "ok"
    assert resp.headers["Access-Control-Allow-Headers"] == "authorization, x-client-info, apikey, content-type"


def test_activity_listing_needs_key(client, make_user):
    make_user(email="a@x.com")
    client.post(
        "/sync-user-activity",
        json={"email": "a@x.com", "activityData": {"login_count": 1}},
        headers={"apikey": "svc-key"},
    )

    denied = client.get("/api/user-activities")
    allowed = client.get("/api/user-activities", headers={"Authorization": "Bearer svc-key"})

    assert denied.status_code == 401
    assert denied.get_json() == {"error": "Invalid service credentials"}
    assert allowed.status_code == 200
    assert allowed.get_json()["items"][0]["email"] == "a@x.com"


def test_admin_login_does_not_need_key(client):
    resp = client.post("/verify-otp", json={"email": "admin@x.com", "otp": "123456"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid or expired OTP"
