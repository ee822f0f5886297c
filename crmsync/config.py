# crmsync/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from sqlalchemy.engine.url import make_url

DEFAULT_LOCKED_FEATURES = (
    "campaigns",
    "templates",
    "workflows",
    "lists",
    "domains",
    "payments",
    "analytics",
)

TRUTHY = ("1", "true", "yes", "on")


def _as_bool(raw: Optional[str], default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY


def _as_int(raw: Optional[str], default: int) -> int:
    if raw is None or not str(raw).strip():
        return default
    return int(raw)


def _as_list(raw: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if raw is None:
        return default
    return tuple(p.strip().strip("/").lower() for p in raw.split(",") if p.strip())


def normalize_database_url(url: str) -> str:
    # Heroku/Render entregan postgres:// y SQLAlchemy 2 solo acepta postgresql://
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


@dataclass(frozen=True)
class Settings:
    """
    Configuración inmutable de la app.

    Se construye UNA vez al arrancar (Settings.from_env) y se pasa
    explícitamente a create_app(); los handlers nunca leen os.environ.
    """

    # ==========================
    #  DATABASE
    # ==========================
    database_url: str = "sqlite:///crmsync.db"

    # ==========================
    #  SECRET / SECURITY
    # ==========================
    secret_key: str = "change-me"
    # Credencial privilegiada del servicio. Si está definida, los endpoints
    # de sync exigen "Authorization: Bearer <key>" o "apikey: <key>".
    service_role_key: Optional[str] = None
    expose_error_details: bool = False

    # ==========================
    #  TRIALS / LEADS
    # ==========================
    trial_check_procedure: Optional[str] = None
    trial_days: int = 15
    trial_check_hour: int = 0
    leads_batch_size: int = 100

    # ==========================
    #  UI
    # ==========================
    locked_features: Tuple[str, ...] = field(default=DEFAULT_LOCKED_FEATURES)

    # ==========================
    #  ADMIN OTP / CORREO
    # ==========================
    otp_ttl_minutes: int = 10
    # si está vacío el código va al propio email que lo pidió
    admin_otp_recipient: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    mail_from: Optional[str] = None
    mail_from_name: str = "CRM Sync"

    # ==========================
    #  CELERY / CLIENTE
    # ==========================
    celery_broker_url: str = "memory://"
    celery_result_backend: Optional[str] = None
    sync_base_url: str = "http://127.0.0.1:8000"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            database_url=normalize_database_url(
                env.get("DATABASE_URL") or "sqlite:///crmsync.db"
            ),
            secret_key=env.get("SECRET_KEY") or env.get("FLASK_SECRET_KEY") or "change-me",
            service_role_key=(env.get("SERVICE_ROLE_KEY") or "").strip() or None,
            expose_error_details=_as_bool(env.get("EXPOSE_ERROR_DETAILS")),
            trial_check_procedure=(env.get("TRIAL_CHECK_PROCEDURE") or "").strip() or None,
            trial_days=_as_int(env.get("TRIAL_DAYS"), 15),
            trial_check_hour=_as_int(env.get("TRIAL_CHECK_HOUR"), 0),
            leads_batch_size=max(1, _as_int(env.get("LEADS_BATCH_SIZE"), 100)),
            locked_features=_as_list(env.get("LOCKED_FEATURES"), DEFAULT_LOCKED_FEATURES),
            otp_ttl_minutes=max(1, _as_int(env.get("OTP_TTL_MINUTES"), 10)),
            admin_otp_recipient=(env.get("ADMIN_OTP_RECIPIENT") or "").strip() or None,
            smtp_host=env.get("SMTP_HOST") or None,
            smtp_port=_as_int(env.get("SMTP_PORT"), 587),
            smtp_user=env.get("SMTP_USER") or None,
            smtp_pass=env.get("SMTP_PASS") or None,
            mail_from=env.get("MAIL_FROM") or None,
            mail_from_name=env.get("MAIL_FROM_NAME") or "CRM Sync",
            celery_broker_url=env.get("CELERY_BROKER_URL") or "memory://",
            celery_result_backend=env.get("CELERY_RESULT_BACKEND") or None,
            sync_base_url=(env.get("SYNC_BASE_URL") or "http://127.0.0.1:8000").rstrip("/"),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    def flask_config(self) -> dict:
        """Claves que Flask / Flask-SQLAlchemy esperan en app.config."""
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        }


# --- Opcional: asegurar carpeta del archivo SQLite (evita "unable to open database file")
def ensure_sqlite_dir(uri: str) -> None:
    url = make_url(uri)
    if url.get_backend_name() != "sqlite":
        return
    db_path = url.database
    if db_path and db_path != ":memory:":
        directory = os.path.dirname(db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
