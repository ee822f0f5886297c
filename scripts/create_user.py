# scripts/create_user.py
#   python scripts/create_user.py user@example.com "Nombre Apellido"
import sys

from crmsync import create_app
from crmsync.exceptions import SyncError
from crmsync.services.accounts import get_user_by_email, create_user


def main(argv):
    if len(argv) < 2:
        print("uso: create_user.py <email> [nombre]")
        return 2

    email = argv[1]
    name = argv[2] if len(argv) > 2 else None

    app = create_app()
    with app.app_context():
        existing = get_user_by_email(email)
        if existing:
            print(f"EXISTS  user_id={existing.id} email={existing.email}")
            return 0
        try:
            user = create_user(email, full_name=name, registration_source="admin")
        except SyncError as e:
            print(f"[X] {e.detail}")
            return 1
        print(f"CREATED user_id={user.id} email={user.email}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
