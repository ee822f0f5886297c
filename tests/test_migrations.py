from sqlalchemy import inspect, text

from crmsync import create_app
from crmsync.database import MIGRATIONS_DIR, db, upgrade_schema

from tests.conftest import make_settings


def test_upgrade_builds_the_schema(tmp_path):
    settings = make_settings(database_url=f"sqlite:///{tmp_path / 'crm.db'}")
    app = create_app(settings, create_tables=False)

    with app.app_context():
        assert inspect(db.engine).get_table_names() == []

        upgrade_schema()

        tables = set(inspect(db.engine).get_table_names())
        with db.engine.connect() as conn:
            version = conn.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
        db.session.remove()
        db.engine.dispose()

    assert {"users", "user_activities", "activity_logs", "leads", "admin_otp"} <= tables
    assert version == "0002_admin_otp"


def test_app_uses_the_repo_alembic_folder():
    app = create_app(make_settings())

    assert MIGRATIONS_DIR.endswith("alembic")
    assert app.extensions["migrate"].directory == MIGRATIONS_DIR
