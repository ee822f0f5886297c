# crmsync/utils.py
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

UTC = dt.timezone.utc


def utcnow() -> dt.datetime:
    # Naive en UTC: SQLite no guarda TZ y Postgres usa "timestamp without time zone"
    return dt.datetime.now(tz=UTC).replace(tzinfo=None)


def iso_z(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat() + "Z"


def parse_datetime(raw: Any) -> Optional[dt.datetime]:
    """
    Acepta datetime o string ISO-8601 (con 'Z' o con offset).
    Devuelve datetime naive en UTC, o None si viene vacío.
    Lanza ValueError si el formato no es válido.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, dt.datetime):
        value = raw
    elif isinstance(raw, dt.date):
        value = dt.datetime(raw.year, raw.month, raw.day)
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = dt.datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def parse_date(raw: Any) -> Optional[dt.date]:
    """'2024-01-01' o un timestamp ISO completo -> date."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, dt.datetime):
        return raw.date()
    if isinstance(raw, dt.date):
        return raw
    text = str(raw).strip()
    if len(text) > 10:
        parsed = parse_datetime(text)
        return parsed.date() if parsed else None
    return dt.date.fromisoformat(text)


def normalize_email(raw: Any) -> str:
    return str(raw or "").strip().lower()
