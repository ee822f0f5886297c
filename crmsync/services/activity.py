# crmsync/services/activity.py
"""
Escrituras de telemetría de actividad:
  - upsert_user_activity: una fila por usuario (ON CONFLICT user_id, gana la última)
  - insert_activity_logs: insert en lote, todo o nada
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from crmsync.database import db, dialect_name
from crmsync.exceptions import StoreError, ValidationError
from crmsync.models import ActivityLog, User, UserActivity
from crmsync.utils import parse_date, parse_datetime, utcnow

logger = logging.getLogger(__name__)

ACTIVITY_FIELDS = (
    "login_count",
    "subscription_days_left",
    "daily_time_spent",
    "total_time_spent",
    "last_active",
    "updated_at",
)

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


def _as_int(data: Dict[str, Any], key: str, default: Optional[int], prefix: str) -> Optional[int]:
    raw = data.get(key)
    if raw is None or raw == "":
        return default
    # bool es subclase de int; no lo aceptamos como número
    if isinstance(raw, bool):
        raise ValidationError(f"{prefix}.{key} must be a number")
    try:
        if isinstance(raw, int):
            value = raw
        elif isinstance(raw, float):
            value = int(round(raw))
        else:
            value = int(round(float(str(raw).strip())))
    except (ValueError, OverflowError):
        # 'abc', inf, nan
        raise ValidationError(f"{prefix}.{key} must be a number")
    # columnas INTEGER: mismo rango en SQLite y Postgres
    if not INT_MIN <= value <= INT_MAX:
        raise ValidationError(f"{prefix}.{key} must be a number")
    return value


def _upsert_insert():
    """insert() con soporte ON CONFLICT según el dialecto activo."""
    name = dialect_name()
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise StoreError(f"Upsert not supported on dialect {name}")
    return insert


# ---------------------------------------------------------
# USER ACTIVITY (upsert)
# ---------------------------------------------------------
def build_activity_row(user_id: str, activity_data: Any) -> Dict[str, Any]:
    if not isinstance(activity_data, dict):
        raise ValidationError("activityData must be an object")

    try:
        last_active = parse_datetime(activity_data.get("last_active"))
    except (TypeError, ValueError):
        raise ValidationError("activityData.last_active must be an ISO-8601 timestamp")

    now = utcnow()
    return {
        "user_id": user_id,
        "login_count": _as_int(activity_data, "login_count", 0, "activityData"),
        "subscription_days_left": _as_int(
            activity_data, "subscription_days_left", None, "activityData"
        ),
        "daily_time_spent": _as_int(activity_data, "daily_time_spent", 0, "activityData"),
        "total_time_spent": _as_int(activity_data, "total_time_spent", 0, "activityData"),
        "last_active": last_active or now,
        "updated_at": now,
    }


def upsert_user_activity(user_id: str, activity_data: Any) -> UserActivity:
    row = build_activity_row(user_id, activity_data)
    insert = _upsert_insert()

    stmt = insert(UserActivity).values(**row)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={k: stmt.excluded[k] for k in ACTIVITY_FIELDS},
    )

    try:
        db.session.execute(stmt)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("upsert_user_activity failed user_id=%s: %s", user_id, e, exc_info=True)
        raise StoreError(str(e), public_message="Failed to sync user activity") from e

    return db.session.execute(
        select(UserActivity).where(UserActivity.user_id == user_id)
    ).scalar_one()


# ---------------------------------------------------------
# ACTIVITY LOGS (insert en lote)
# ---------------------------------------------------------
def build_log_rows(user_id: str, activity_logs: Any) -> List[Dict[str, Any]]:
    if not isinstance(activity_logs, list):
        raise ValidationError("activityLogs must be an array")

    rows = []
    for i, log in enumerate(activity_logs):
        prefix = f"activityLogs[{i}]"
        if not isinstance(log, dict):
            raise ValidationError(f"{prefix} must be an object")
        try:
            visit_date = parse_date(log.get("visit_date"))
        except (TypeError, ValueError):
            raise ValidationError(f"{prefix}.visit_date must be a YYYY-MM-DD date")
        try:
            timestamp = parse_datetime(log.get("timestamp"))
        except (TypeError, ValueError):
            raise ValidationError(f"{prefix}.timestamp must be an ISO-8601 timestamp")

        rows.append(
            {
                "user_id": user_id,
                "page_name": log.get("page_name"),
                "page_url": log.get("page_url"),
                "time_spent": _as_int(log, "time_spent", 0, prefix),
                "visit_date": visit_date,
                "timestamp": timestamp or utcnow(),
            }
        )
    return rows


def insert_activity_logs(user_id: str, activity_logs: Any) -> List[Dict[str, Any]]:
    """
    Inserta todos los logs en una sola transacción. Cualquier fila con error
    aborta el lote completo. No hay clave de idempotencia: reenviar el mismo
    lote duplica filas.
    """
    rows = build_log_rows(user_id, activity_logs)
    items = [ActivityLog(**r) for r in rows]

    try:
        db.session.add_all(items)
        db.session.flush()
        written = [item.as_dict() for item in items]
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(
            "insert_activity_logs failed user_id=%s rows=%d: %s", user_id, len(rows), e, exc_info=True
        )
        raise StoreError(str(e), public_message="Failed to sync activity logs") from e

    return written


# ---------------------------------------------------------
# LISTADO PARA EL DASHBOARD
# ---------------------------------------------------------
def list_user_activities() -> List[Dict[str, Any]]:
    rows = db.session.execute(
        select(UserActivity, User.email)
        .join(User, User.id == UserActivity.user_id)
        .order_by(UserActivity.updated_at.desc())
    ).all()

    items = []
    for activity, email in rows:
        item = activity.as_dict()
        item["email"] = email
        items.append(item)
    return items
