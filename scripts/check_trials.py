# scripts/check_trials.py
# Ejecuta una vez el chequeo diario de trials contra la base configurada.
import sys

from crmsync import create_app
from crmsync.services.trials import run_trial_check


def main():
    app = create_app()
    with app.app_context():
        result = run_trial_check(app.extensions["crmsync"])
    print(
        f"EXPIRED={result['expired_trials_count']} "
        f"FLIPPED={result['flipped']} AT={result['timestamp']}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
