# crmsync/services/leads.py
from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from crmsync.config import Settings
from crmsync.database import db
from crmsync.exceptions import NotFoundError, StoreError, SyncError, ValidationError
from crmsync.models import Lead, User
from crmsync.models.lead import PLAN_TRIAL, STATUS_NEW, USER_TYPE_PAID, USER_TYPE_TRIAL
from crmsync.services.accounts import get_or_create_user
from crmsync.services.activity import upsert_user_activity
from crmsync.utils import normalize_email, parse_datetime, utcnow

logger = logging.getLogger(__name__)

REGISTRATION_SOURCE = "Software Registration"

TEXT_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "company",
    "state",
    "gender",
    "exam_category",
    "how_did_you_hear",
    "plan",
    "referral_code",
)
DATE_FIELDS = (
    "trial_start_date",
    "trial_end_date",
    "subscription_start_date",
    "subscription_end_date",
    "next_payment_date",
)

TRUE_STRINGS = ("true", "1", "yes")
FALSE_STRINGS = ("false", "0", "no")


def _full_name(data: Dict[str, Any], fallback: Optional[Lead] = None) -> Optional[str]:
    if data.get("name"):
        return str(data["name"]).strip()
    first = data.get("first_name") or (fallback.first_name if fallback else None) or ""
    last = data.get("last_name") or (fallback.last_name if fallback else None) or ""
    name = f"{first} {last}".strip()
    if name:
        return name
    return fallback.name if fallback else None


def _dates(data: Dict[str, Any], prefix: str = "") -> Dict[str, Optional[dt.datetime]]:
    out = {}
    for key in DATE_FIELDS:
        try:
            out[key] = parse_datetime(data.get(key))
        except (TypeError, ValueError):
            raise ValidationError(f"{prefix}{key} must be an ISO-8601 timestamp")
    return out


def _number(data: Dict[str, Any], key: str, prefix: str = "") -> Optional[float]:
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"{prefix}{key} must be a number")
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{prefix}{key} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{prefix}{key} must be a number")
    return value


def _flag(data: Dict[str, Any], key: str, prefix: str = "") -> Optional[bool]:
    """true/false reales; también "true"/"false", "1"/"0" y 1/0 (exports CSV)."""
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise ValidationError(f"{prefix}{key} must be a boolean")


def _tags(data: Dict[str, Any], prefix: str = "") -> Optional[List[str]]:
    raw = data.get("tags")
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ValidationError(f"{prefix}tags must be an array")
    return [str(t) for t in raw]


def _get_lead_by_email(email: str) -> Optional[Lead]:
    return db.session.execute(
        select(Lead).where(func.lower(Lead.email) == email).order_by(Lead.id)
    ).scalars().first()


def _sync_activity_quietly(user_id: str, activity_data: Any) -> None:
    # La actividad es opcional en el registro: si falla se loguea y seguimos
    try:
        upsert_user_activity(user_id, activity_data)
        logger.info("Activity data updated for user_id=%s", user_id)
    except SyncError as e:
        logger.error("Error updating activity data for user_id=%s: %s", user_id, e.detail)


# ---------------------------------------------------------
# REGISTRO DESDE EL SOFTWARE
# ---------------------------------------------------------
def _merge_into_existing(lead: Lead, data: Dict[str, Any], dates, now: dt.datetime) -> None:
    """El payload gana cuando trae valor; si no, se conserva lo existente."""
    for key in TEXT_FIELDS:
        if data.get(key):
            setattr(lead, key, data[key])
    lead.name = _full_name(data, fallback=lead)

    lead.source = data.get("source") or lead.source or REGISTRATION_SOURCE
    lead.status = data.get("status") or lead.status or STATUS_NEW
    lead.user_type = data.get("user_type") or lead.user_type or USER_TYPE_TRIAL
    lead.subscription_plan = data.get("subscription_plan") or lead.subscription_plan

    amount_paid = _number(data, "amount_paid")
    if amount_paid:
        lead.amount_paid = amount_paid
    value = _number(data, "value")
    if value:
        lead.value = value

    for key, parsed in dates.items():
        if parsed is not None:
            setattr(lead, key, parsed)

    for key in ("is_trial_active", "is_subscription_active"):
        flag = _flag(data, key)
        if flag is not None:
            setattr(lead, key, flag)

    tags = _tags(data)
    if tags:
        lead.tags = tags

    if data.get("notes"):
        previous = lead.notes or ""
        lead.notes = f"{previous}\n\n[Software Registration Update] {data['notes']}"

    lead.updated_at = now


def _new_lead(data: Dict[str, Any], email: str, dates, settings: Settings, now: dt.datetime) -> Lead:
    trial_flag = _flag(data, "is_trial_active")
    notes = data.get("notes")

    lead = Lead(
        email=email,
        name=_full_name(data),
        source=data.get("source") or REGISTRATION_SOURCE,
        status=data.get("status") or STATUS_NEW,
        user_type=data.get("user_type") or USER_TYPE_TRIAL,
        subscription_plan=data.get("subscription_plan") or PLAN_TRIAL,
        amount_paid=_number(data, "amount_paid") or 0,
        value=_number(data, "value"),
        is_trial_active=True if trial_flag is None else trial_flag,
        is_subscription_active=bool(_flag(data, "is_subscription_active")),
        tags=_tags(data),
        notes=f"[Software Registration] {notes}" if notes else "Lead created from software registration",
    )
    for key in TEXT_FIELDS:
        setattr(lead, key, data.get(key) or None)
    for key, parsed in dates.items():
        setattr(lead, key, parsed)

    if lead.trial_start_date is None:
        lead.trial_start_date = now
    if lead.trial_end_date is None:
        lead.trial_end_date = now + dt.timedelta(days=settings.trial_days)
    return lead


def sync_registration(data: Any, settings: Settings) -> Dict[str, Any]:
    """
    Crea o actualiza el lead del email recibido y asegura la cuenta.
    Devuelve {"lead_id": ..., "user_id": ..., "action": "created" | "updated"}.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    email = normalize_email(data.get("email"))
    if not email:
        raise ValidationError("Email is required")

    # validar todo antes de tocar la base
    dates = _dates(data)
    _number(data, "amount_paid")
    _number(data, "value")
    _flag(data, "is_trial_active")
    _flag(data, "is_subscription_active")
    _tags(data)
    now = utcnow()

    user = get_or_create_user(
        email,
        full_name=_full_name(data),
        registration_source=data.get("registration_source") or "software",
    )

    lead = _get_lead_by_email(email)
    if lead:
        action = "updated"
        _merge_into_existing(lead, data, dates, now)
    else:
        action = "created"
        lead = _new_lead(data, email, dates, settings, now)
        db.session.add(lead)

    if not lead.user_id:
        lead.user_id = user.id

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("sync_registration failed email=%s: %s", email, e, exc_info=True)
        raise StoreError(str(e), public_message="Failed to sync registration") from e

    logger.info("Registration %s lead_id=%s email=%s", action, lead.id, email)

    if data.get("activityData"):
        _sync_activity_quietly(user.id, data["activityData"])

    return {"lead_id": lead.id, "user_id": user.id, "action": action}


# ---------------------------------------------------------
# IMPORT MASIVO (CSV del dashboard)
# ---------------------------------------------------------
def normalize_import_lead(raw: Any, index: int, settings: Settings, now: dt.datetime) -> Dict[str, Any]:
    prefix = f"leads[{index}]."
    if not isinstance(raw, dict):
        raise ValidationError(f"leads[{index}] must be an object")

    dates = _dates(raw, prefix)
    subscribed = bool(_flag(raw, "is_subscription_active", prefix))
    trial_flag = _flag(raw, "is_trial_active", prefix)

    row = {key: raw.get(key) or None for key in TEXT_FIELDS}
    row.update(
        {
            "name": _full_name(raw),
            "email": normalize_email(raw.get("email")) or None,
            "company": raw.get("company") or raw.get("state") or None,
            "source": raw.get("source") or raw.get("how_did_you_hear") or None,
            "status": raw.get("status") or STATUS_NEW,
            "user_type": raw.get("user_type") or (USER_TYPE_PAID if subscribed else USER_TYPE_TRIAL),
            "subscription_plan": raw.get("subscription_plan") or None,
            "notes": raw.get("notes") or None,
            "value": _number(raw, "value", prefix),
            "amount_paid": _number(raw, "amount_paid", prefix) or 0,
            "is_trial_active": True if trial_flag is None else trial_flag,
            "is_subscription_active": subscribed,
            "tags": _tags(raw, prefix),
        }
    )
    row.update(dates)
    if row["trial_start_date"] is None:
        row["trial_start_date"] = now
    if row["trial_end_date"] is None:
        row["trial_end_date"] = now + dt.timedelta(days=settings.trial_days)
    return row


def bulk_import_leads(leads: Any, user_id: Any, settings: Settings) -> Dict[str, Any]:
    """
    Inserta los leads por lotes de settings.leads_batch_size. Un lote que
    falla se revierte y se reporta; los demás siguen.
    """
    if not user_id:
        raise ValidationError("User ID is required")
    if not isinstance(leads, list) or not leads:
        raise ValidationError("Leads data is required and must be an array")

    user_id = str(user_id)
    if db.session.get(User, user_id) is None:
        raise NotFoundError(f"Import owner not found: {user_id}")

    now = utcnow()
    rows = [normalize_import_lead(raw, i, settings, now) for i, raw in enumerate(leads)]

    size = settings.leads_batch_size
    imported = []
    errors = []

    for start in range(0, len(rows), size):
        batch = rows[start:start + size]
        batch_no = start // size + 1
        try:
            items = [Lead(user_id=user_id, **r) for r in batch]
            db.session.add_all(items)
            db.session.flush()
            written = [item.as_dict() for item in items]
            db.session.commit()
            imported.extend(written)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Bulk import batch %d failed (%d leads): %s", batch_no, len(batch), e, exc_info=True)
            errors.append(
                {
                    "batch": batch_no,
                    "error": str(e) if settings.expose_error_details else "Failed to import batch",
                    "leads": len(batch),
                }
            )

    logger.info("Bulk import user_id=%s imported=%d total=%d", user_id, len(imported), len(rows))
    return {
        "imported": imported,
        "total": len(rows),
        "errors": errors,
    }
