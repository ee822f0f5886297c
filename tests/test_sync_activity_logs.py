from unittest.mock import patch

import pytest

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from crmsync.database import db
from crmsync.models import ActivityLog

HOME = {"page_name": "Home", "page_url": "/", "time_spent": 30, "visit_date": "2024-01-01"}


def _rows():
    return db.session.execute(select(ActivityLog).order_by(ActivityLog.id)).scalars().all()


def test_single_log_message(client, make_user):
    make_user(email="a@x.com", user_id="u1")

    resp = client.post("/sync-activity-logs", json={"email": "a@x.com", "activityLogs": [HOME]})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "1 activity logs synced successfully"
    assert body["data"][0]["user_id"] == "u1"
    assert body["data"][0]["visit_date"] == "2024-01-01"
    assert body["data"][0]["timestamp"].endswith("Z")


def test_batch_inserts_every_row_for_the_user(client, make_user):
    make_user(email="a@x.com", user_id="u1")
    logs = [dict(HOME, page_name=f"Page {i}", time_spent=i) for i in range(4)]

    resp = client.post("/sync-activity-logs", json={"email": "a@x.com", "activityLogs": logs})

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "4 activity logs synced successfully"
    rows = _rows()
    assert len(rows) == 4
    assert {r.user_id for r in rows} == {"u1"}
    assert [r.page_name for r in rows] == ["Page 0", "Page 1", "Page 2", "Page 3"]


def test_client_timestamp_is_kept(client, make_user):
    make_user(email="a@x.com")
    log = dict(HOME, timestamp="2024-01-01T08:30:00+02:00")

    client.post("/sync-activity-logs", json={"email": "a@x.com", "activityLogs": [log]})

    assert _rows()[0].timestamp.isoformat() == "2024-01-01T06:30:00"


def test_resubmitting_duplicates_rows(client, make_user):
    make_user(email="a@x.com")
    payload = {"email": "a@x.com", "activityLogs": [HOME]}

    client.post("/sync-activity-logs", json=payload)
    client.post("/sync-activity-logs", json=payload)

    assert len(_rows()) == 2


def test_unknown_email_writes_nothing(client):
    resp = client.post("/sync-activity-logs", json={"email": "ghost@x.com", "activityLogs": [HOME]})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "User not found"}
    assert _rows() == []


def test_one_bad_row_rejects_the_whole_batch(client, make_user):
    make_user(email="a@x.com")
    logs = [HOME, dict(HOME, visit_date="01/02/2024")]

    resp = client.post("/sync-activity-logs", json={"email": "a@x.com", "activityLogs": logs})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "activityLogs[1].visit_date must be a YYYY-MM-DD date"
    assert _rows() == []


def test_store_failure_aborts_batch(client, make_user):
    make_user(email="a@x.com")
    boom = IntegrityError("INSERT ...", {}, Exception("violates check constraint"))

    with patch.object(db.session, "flush", side_effect=boom):
        resp = client.post("/sync-activity-logs", json={"email": "a@x.com", "activityLogs": [HOME, HOME]})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Failed to sync activity logs"}
    assert _rows() == []


def test_activity_logs_must_be_a_list(client, make_user):
    make_user(email="a@x.com")

    resp = client.post("/sync-activity-logs", json={"email": "a@x.com", "activityLogs": {"a": 1}})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "activityLogs must be an array"



@pytest.mark.parametrize("time_spent", ["1000000000000000000000000000000", "1e999", "-1e999"])
def test_out_of_range_time_spent_rejects_batch(client, make_user, time_spent):
    make_user(email="a@x.com")
    body = (
        '{"email": "a@x.com", "activityLogs": ['
        '{"page_name": "Home", "time_spent": 5}, '
        '{"page_name": "Leads", "time_spent": %s}]}' % time_spent
    )

    resp = client.post("/sync-activity-logs", data=body, content_type="application/json")

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "activityLogs[1].time_spent must be a number"}
    assert _rows() == []
