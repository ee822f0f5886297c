# crmsync/__init__.py
from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from crmsync.config import Settings, ensure_sqlite_dir
from crmsync.database import db, init_db

__all__ = ["create_app", "db", "Settings"]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] %(levelname)s (%(name)s) %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(settings: Optional[Settings] = None, create_tables: bool = True) -> Flask:
    """
    Factory de la app.

    Si no se pasa Settings, se construye una vez desde el entorno (.env incluido).
    create_tables=False deja el esquema en manos de las migraciones (alembic/).
    """
    if settings is None:
        load_dotenv(override=False)
        settings = Settings.from_env()

    configure_logging(settings.log_level)

    app = Flask(__name__)

    # -----------------------------------------------------------
    # CONFIG GENERAL
    # -----------------------------------------------------------
    app.config.update(settings.flask_config())
    app.extensions["crmsync"] = settings
    ensure_sqlite_dir(settings.database_url)

    # -----------------------------------------------------------
    # INICIALIZACIÓN DE EXTENSIONES
    # -----------------------------------------------------------
    init_db(app)

    # Importar modelos
    from crmsync import models  # noqa: F401

    # -----------------------------------------------------------
    # BLUEPRINTS / HTTP
    # -----------------------------------------------------------
    from crmsync.http import add_cors_headers, register_error_handlers
    from crmsync.routes import register_routes

    register_routes(app)
    register_error_handlers(app)
    app.after_request(add_cors_headers)

    # -----------------------------------------------------------
    # HEALTHCHECK
    # -----------------------------------------------------------
    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    # Crear tablas si no existen
    with app.app_context():
        if create_tables:
            db.create_all()
        app.logger.info("crmsync ready (db=%s)", db.engine.url.render_as_string(hide_password=True))

    return app
