from unittest.mock import patch


def test_lists_activity_with_email(client, make_user):
    make_user(email="a@x.com")
    client.post("/sync-user-activity", json={"email": "a@x.com", "activityData": {"login_count": 4}})

    resp = client.get("/api/user-activities")

    assert resp.status_code == 200
    (item,) = resp.get_json()["items"]
    assert item["email"] == "a@x.com"
    assert item["login_count"] == 4


def test_read_failure(client):
    with patch("crmsync.routes.activities.list_user_activities", side_effect=RuntimeError("db down")):
        resp = client.get("/api/user-activities")

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to fetch user activities"}


def test_healthz_has_cors(client):
    resp = client.get("/healthz")

    assert resp.get_json() == {"ok": True}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
