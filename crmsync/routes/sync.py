# crmsync/routes/sync.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from crmsync.exceptions import ValidationError
from crmsync.http import fail_safe, get_settings, json_body
from crmsync.services.accounts import create_user, resolve_user_id
from crmsync.services.activity import insert_activity_logs, upsert_user_activity
from crmsync.services.leads import bulk_import_leads, sync_registration
from crmsync.services.trials import run_trial_check

bp = Blueprint("sync", __name__)

METHODS = ["POST", "OPTIONS"]


def _require_object(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# ---------------------------------------------------------
# POST /sync-user-activity
#   {email, activityData: {...}} -> upsert por user_id
# ---------------------------------------------------------
@bp.route("/sync-user-activity", methods=METHODS)
@fail_safe()
def sync_user_activity():
    data = _require_object(json_body())
    email = data.get("email")
    activity_data = data.get("activityData")

    current_app.logger.info("Received activity sync for: %s %s", email, activity_data)

    user_id = resolve_user_id(email)
    row = upsert_user_activity(user_id, activity_data)

    return jsonify(
        {
            "success": True,
            "message": "User activity synced successfully",
            "data": row.as_dict(),
        }
    )


# ---------------------------------------------------------
# POST /sync-activity-logs
#   {email, activityLogs: [...]} -> insert en lote
# ---------------------------------------------------------
@bp.route("/sync-activity-logs", methods=METHODS)
@fail_safe()
def sync_activity_logs():
    data = _require_object(json_body())
    email = data.get("email")
    activity_logs = data.get("activityLogs")

    n = len(activity_logs) if isinstance(activity_logs, list) else 0
    current_app.logger.info("Received activity logs for: %s %d logs", email, n)

    user_id = resolve_user_id(email)
    written = insert_activity_logs(user_id, activity_logs)

    return jsonify(
        {
            "success": True,
            "message": f"{len(written)} activity logs synced successfully",
            "data": written,
        }
    )


# ---------------------------------------------------------
# POST /check-trial-status (sin body)
# ---------------------------------------------------------
@bp.route("/check-trial-status", methods=METHODS)
@fail_safe(always_sanitize=True)
def check_trial_status():
    result = run_trial_check(get_settings())
    return jsonify(
        {
            "success": True,
            "message": "Trial status check completed",
            "expiredTrialsCount": result["expired_trials_count"],
            "timestamp": result["timestamp"],
        }
    )


# ---------------------------------------------------------
# POST /sync-registration
# ---------------------------------------------------------
@bp.route("/sync-registration", methods=METHODS)
@fail_safe(success_flag=True)
def sync_registration_view():
    data = _require_object(json_body())
    current_app.logger.info("Received registration data for: %s", data.get("email"))

    result = sync_registration(data, get_settings())
    return jsonify(
        {
            "success": True,
            "message": f"Lead {result['action']} successfully",
            "lead_id": result["lead_id"],
            "action": result["action"],
        }
    )


# ---------------------------------------------------------
# POST /bulk-import-leads
#   200 si todo entró, 207 si algún lote falló
# ---------------------------------------------------------
@bp.route("/bulk-import-leads", methods=METHODS)
@fail_safe(success_flag=True)
def bulk_import_leads_view():
    data = _require_object(json_body())
    result = bulk_import_leads(data.get("leads"), data.get("userId"), get_settings())

    errors = result["errors"]
    body = {
        "success": not errors,
        "imported": len(result["imported"]),
        "total": result["total"],
    }
    if errors:
        body["errors"] = errors
    return jsonify(body), (207 if errors else 200)


# ---------------------------------------------------------
# POST /create-user {email, name?}
# ---------------------------------------------------------
@bp.route("/create-user", methods=METHODS)
@fail_safe()
def create_user_view():
    data = _require_object(json_body())
    user = create_user(
        data.get("email"),
        full_name=data.get("name"),
        registration_source=data.get("registration_source") or "admin",
    )
    return jsonify({"user": user.as_dict()})
