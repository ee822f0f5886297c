# crmsync/services/trials.py
from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any, Dict, Optional

from sqlalchemy import func, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError

from crmsync.config import Settings
from crmsync.database import db, dialect_name
from crmsync.exceptions import TrialCheckError
from crmsync.models import Lead
from crmsync.models.lead import PLAN_UNPAID, STATUS_INACTIVE
from crmsync.utils import iso_z, utcnow

logger = logging.getLogger(__name__)

PROCEDURE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def expire_trials(now: dt.datetime) -> int:
    """
    Procedimiento diario en la app: trials vencidos y sin suscripción
    pasan a Inactive / Unpaid. Solo toca filas que aún no están en ese
    estado, así que repetirlo no cambia nada.
    """
    stmt = (
        update(Lead)
        .where(
            Lead.trial_end_date < now,
            Lead.is_subscription_active.is_(False),
            or_(
                Lead.status != STATUS_INACTIVE,
                Lead.subscription_plan.is_(None),
                Lead.subscription_plan != PLAN_UNPAID,
                Lead.is_trial_active.is_(True),
            ),
        )
        .values(
            status=STATUS_INACTIVE,
            subscription_plan=PLAN_UNPAID,
            is_trial_active=False,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    return int(result.rowcount or 0)


def call_trial_procedure(procedure: str) -> None:
    if not PROCEDURE_NAME_RE.match(procedure):
        raise TrialCheckError(f"Invalid procedure name: {procedure!r}")
    db.session.execute(text(f"SELECT {procedure}()"))


def count_expired_trials(now: dt.datetime) -> int:
    return int(
        db.session.execute(
            select(func.count(Lead.id)).where(
                Lead.trial_end_date < now,
                Lead.subscription_plan == PLAN_UNPAID,
                Lead.status == STATUS_INACTIVE,
            )
        ).scalar_one()
    )


def run_trial_check(settings: Settings, now: Optional[dt.datetime] = None) -> Dict[str, Any]:
    """
    1) Ejecuta el procedimiento (función en Postgres si está configurada,
       si no el UPDATE equivalente en la app).
    2) Cuenta los trials vencidos ya inactivos. Este conteo es solo
       informativo; si falla se reporta 0.
    """
    now = now or utcnow()
    flipped = None

    try:
        if settings.trial_check_procedure and dialect_name() == "postgresql":
            call_trial_procedure(settings.trial_check_procedure)
        else:
            flipped = expire_trials(now)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Error checking trial status: %s", e, exc_info=True)
        raise TrialCheckError(str(e)) from e

    try:
        expired = count_expired_trials(now)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Error getting expired trials stats: %s", e, exc_info=True)
        expired = 0

    logger.info("Trial status check done: flipped=%s expired_total=%d", flipped, expired)
    return {
        "expired_trials_count": expired,
        "flipped": flipped,
        "timestamp": iso_z(now),
    }
