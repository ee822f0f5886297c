# crmsync/services/otp.py
"""
Login de administración por código de un solo uso (OTP).

send_otp: borra los códigos anteriores del email, guarda uno nuevo con
caducidad y lo envía por correo.
verify_otp: el código debe existir, no estar usado ni caducado; se marca
usado en el mismo UPDATE, así que dos verificaciones no pueden ganar ambas.
"""
from __future__ import annotations

import datetime as dt
import logging
import secrets
from typing import Any, Optional

from flask import render_template
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError

from crmsync.config import Settings
from crmsync.database import db
from crmsync.exceptions import StoreError, ValidationError
from crmsync.mailer import send_email
from crmsync.models import AdminOtp
from crmsync.utils import normalize_email, utcnow

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Admin Login OTP - CRM Sync"
INVALID_OTP = "Invalid or expired OTP"


def generate_otp() -> str:
    """6 dígitos, 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def send_otp(email: Any, settings: Settings, now: Optional[dt.datetime] = None) -> AdminOtp:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")

    now = now or utcnow()
    code = generate_otp()

    try:
        db.session.execute(delete(AdminOtp).where(AdminOtp.email == email))
        otp = AdminOtp(
            email=email,
            otp_code=code,
            expires_at=now + dt.timedelta(minutes=settings.otp_ttl_minutes),
            used=False,
            created_at=now,
        )
        db.session.add(otp)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("send_otp: store failed email=%s: %s", email, e, exc_info=True)
        raise StoreError(str(e), public_message="Failed to store OTP") from e

    recipient = settings.admin_otp_recipient or email
    text = (
        f"Admin login requested for {email}.\n\n"
        f"Your one-time password: {code}\n"
        f"Valid for {settings.otp_ttl_minutes} minutes. Do not share this code.\n"
    )
    html = render_template(
        "email/admin_otp.html", email=email, code=code, ttl_minutes=settings.otp_ttl_minutes
    )
    send_email(settings, recipient, OTP_SUBJECT, text, html)

    logger.info("OTP issued for %s (sent to %s)", email, recipient)
    return otp


def verify_otp(email: Any, code: Any, now: Optional[dt.datetime] = None) -> None:
    email = normalize_email(email)
    code = str(code or "").strip()
    if not email or not code:
        raise ValidationError("Email and OTP are required")

    now = now or utcnow()
    stmt = (
        update(AdminOtp)
        .where(
            AdminOtp.email == email,
            AdminOtp.otp_code == code,
            AdminOtp.used.is_(False),
            AdminOtp.expires_at > now,
        )
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.session.execute(stmt)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("verify_otp failed email=%s: %s", email, e, exc_info=True)
        raise StoreError(str(e), public_message="Failed to verify OTP") from e

    if not result.rowcount:
        logger.warning("Invalid or expired OTP for %s", email)
        raise ValidationError(INVALID_OTP)

    logger.info("OTP verified for %s", email)
