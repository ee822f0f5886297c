# crmsync/celery_app.py
# -*- coding: utf-8 -*-
"""
Celery para el chequeo diario de trials.

  celery -A crmsync.celery_app:celery_app worker --beat
"""
import logging

from celery import Celery
from celery.schedules import crontab
from dotenv import load_dotenv

from crmsync.config import Settings

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Celery (EAGER por defecto si no hay broker)
# -----------------------------------------------------------------------------
def make_celery(settings: Settings) -> Celery:
    app = Celery(
        "crmsync",
        broker=settings.celery_broker_url,
        backend=settings.celery_result_backend,
    )

    if settings.celery_broker_url.startswith("memory"):
        # Ejecuta en el mismo proceso (desarrollo)
        app.conf.update(task_always_eager=True, task_ignore_result=True)
        logger.info("[celery] EAGER mode ON (memory broker)")
    else:
        logger.info("[celery] BROKER=%s BACKEND=%s", settings.celery_broker_url, settings.celery_result_backend)

    app.conf.timezone = "UTC"
    app.conf.beat_schedule = {
        "daily-trial-status-check": {
            "task": "crmsync.check_trial_status",
            "schedule": crontab(hour=settings.trial_check_hour, minute=0),
        },
    }
    return app


load_dotenv(override=False)
_settings = Settings.from_env()
celery_app = make_celery(_settings)


# -----------------------------------------------------------------------------
# App Flask: creación perezosa (una por proceso worker)
# -----------------------------------------------------------------------------
_flask_app = None


def _get_flask_app():
    global _flask_app
    if _flask_app is None:
        from crmsync import create_app

        _flask_app = create_app(_settings)
    return _flask_app


@celery_app.task(name="crmsync.check_trial_status")
def check_trial_status():
    from crmsync.services.trials import run_trial_check

    app = _get_flask_app()
    with app.app_context():
        result = run_trial_check(app.extensions["crmsync"])
    logger.info("[celery] trial check: %s", result)
    return result
