# crmsync/routes/activities.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from crmsync.exceptions import AuthError
from crmsync.http import check_service_key, error_response, get_settings
from crmsync.services.activity import list_user_activities

bp = Blueprint("activities", __name__, url_prefix="/api")


@bp.get("/user-activities")
def user_activities():
    """Resumen de actividad por usuario (lo consume el dashboard)."""
    try:
        check_service_key(get_settings())
    except AuthError as e:
        current_app.logger.warning("user_activities: %s", e.detail)
        return error_response(e.public_message, e.status_code)

    try:
        items = list_user_activities()
    except Exception:
        current_app.logger.exception("user_activities: error leyendo actividades")
        return jsonify({"error": "Failed to fetch user activities"}), 500
    return jsonify({"items": items})
