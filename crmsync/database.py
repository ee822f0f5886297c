# crmsync/database.py
"""
SQLAlchemy compartido y migraciones.

Las revisiones viven en <repo>/alembic/versions y se aplican con
`flask --app wsgi db upgrade` o `python scripts/upgrade_db.py`.
"""
import os

from flask_migrate import Migrate, upgrade
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

MIGRATIONS_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "alembic"
)

# Nombres de constraints/índices fijos: las revisiones de alembic los usan tal cual
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db = SQLAlchemy(metadata=metadata)
migrate = Migrate(directory=MIGRATIONS_DIR, render_as_batch=True)


def init_db(app) -> None:
    db.init_app(app)
    migrate.init_app(app, db)


def upgrade_schema(revision: str = "head") -> None:
    """Aplica las revisiones pendientes. Requiere app context."""
    upgrade(directory=MIGRATIONS_DIR, revision=revision)


def dialect_name() -> str:
    """'postgresql', 'sqlite', ..."""
    return db.engine.dialect.name
