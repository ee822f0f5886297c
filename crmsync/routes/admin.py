# crmsync/routes/admin.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, session

from crmsync.http import fail_safe, get_settings, json_body
from crmsync.services.otp import send_otp, verify_otp
from crmsync.utils import iso_z, normalize_email, utcnow

bp = Blueprint("admin", __name__)

METHODS = ["POST", "OPTIONS"]


def _body() -> dict:
    data = json_body()
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------
# POST /send-otp {email}
# ---------------------------------------------------------
@bp.route("/send-otp", methods=METHODS)
@fail_safe(always_sanitize=True, success_flag=True, public=True)
def send_otp_view():
    data = _body()
    current_app.logger.info("OTP requested for: %s", data.get("email"))
    send_otp(data.get("email"), get_settings())
    return jsonify({"success": True, "message": "OTP sent successfully"})


# ---------------------------------------------------------
# POST /verify-otp {email, otp}
# ---------------------------------------------------------
@bp.route("/verify-otp", methods=METHODS)
@fail_safe(always_sanitize=True, success_flag=True, public=True)
def verify_otp_view():
    data = _body()
    verify_otp(data.get("email"), data.get("otp"))

    session["admin_email"] = normalize_email(data.get("email"))
    session["admin_verified_at"] = iso_z(utcnow())
    return jsonify({"success": True, "message": "OTP verified successfully"})
