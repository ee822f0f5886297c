# crmsync/routes/pages.py
"""
Páginas HTML mínimas y el bloqueo de secciones deshabilitadas.

El bloqueo es solo navegación (UX): no es un control de acceso.
La autorización real sigue en el servidor (SERVICE_ROLE_KEY).
"""
from __future__ import annotations

from flask import Blueprint, redirect, render_template, request, url_for
from sqlalchemy import func, select

from crmsync.database import db
from crmsync.http import get_settings
from crmsync.models import Lead, UserActivity
from crmsync.models.lead import STATUS_INACTIVE

bp = Blueprint("pages", __name__)


def feature_label(feature: str) -> str:
    return feature.replace("-", " ").replace("_", " ").strip().title()


def locked_feature_for(path: str):
    """Devuelve la sección bloqueada a la que apunta el path, o None."""
    first = path.strip("/").split("/", 1)[0].lower()
    if first and first in get_settings().locked_features:
        return first
    return None


@bp.before_app_request
def gate_locked_features():
    if request.method not in ("GET", "HEAD"):
        return None
    if request.endpoint in ("pages.locked", "static"):
        return None
    feature = locked_feature_for(request.path)
    if feature:
        return redirect(url_for("pages.locked", feature=feature))
    return None


# ------------------------------
# PÁGINAS
# ------------------------------

@bp.get("/")
def dashboard():
    total_leads = db.session.execute(select(func.count(Lead.id))).scalar_one()
    inactive_leads = db.session.execute(
        select(func.count(Lead.id)).where(Lead.status == STATUS_INACTIVE)
    ).scalar_one()
    tracked_users = db.session.execute(select(func.count(UserActivity.id))).scalar_one()
    return render_template(
        "dashboard.html",
        total_leads=total_leads,
        inactive_leads=inactive_leads,
        tracked_users=tracked_users,
    )


@bp.get("/locked/<feature>")
def locked(feature: str):
    return render_template("locked.html", feature_name=feature_label(feature))
