# scripts/batch_activity_sync.py
# Empuja un export JSON de actividad a los endpoints de sync.
#
#   python scripts/batch_activity_sync.py export.json
#
# Formato: [{"email": ..., "activity": {...}, "activity_logs": [...]}, ...]
import json
import sys

from dotenv import load_dotenv

from crmsync.config import Settings
from crmsync.services.sync_client import ActivitySyncClient, push_export


def main(argv):
    if len(argv) < 2:
        print("uso: batch_activity_sync.py <export.json>")
        return 2

    load_dotenv(override=False)
    settings = Settings.from_env()

    with open(argv[1], "r", encoding="utf-8") as fh:
        users = json.load(fh)
    if not isinstance(users, list):
        print("[X] El export debe ser una lista de usuarios")
        return 1

    with ActivitySyncClient(settings.sync_base_url, settings.service_role_key) as client:
        summary = push_export(client, users)

    print(f"SYNCED={summary['synced']} SKIPPED={summary['skipped']} TOTAL={summary['total']}")
    return 0 if summary["skipped"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
