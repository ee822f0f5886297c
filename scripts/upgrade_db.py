# scripts/upgrade_db.py
# Aplica las migraciones de alembic/ sobre DATABASE_URL.
#
#   python scripts/upgrade_db.py [revision]
import sys

from crmsync import create_app
from crmsync.database import upgrade_schema


def main(argv):
    revision = argv[1] if len(argv) > 1 else "head"
    app = create_app(create_tables=False)
    with app.app_context():
        upgrade_schema(revision)
    print(f"UPGRADED to {revision}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
