"""
Pytest fixtures for crmsync tests
"""
import datetime as dt

import pytest

from crmsync import create_app
from crmsync.config import Settings
from crmsync.database import db
from crmsync.models import Lead, User
from crmsync.utils import utcnow


def make_settings(**overrides):
    values = {
        "database_url": "sqlite://",
        "secret_key": "test-secret-key",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    _app = create_app(settings)
    _app.config.update({"TESTING": True})
    with _app.app_context():
        yield _app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def make_user(app):
    def _make(email="a@x.com", user_id=None, full_name=None):
        user = User(email=email, full_name=full_name)
        if user_id:
            user.id = user_id
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_lead(app):
    def _make(**fields):
        values = {
            "name": "Test Lead",
            "email": "lead@x.com",
            "status": "Active",
            "subscription_plan": "Trial User",
            "trial_end_date": utcnow() + dt.timedelta(days=5),
        }
        values.update(fields)
        lead = Lead(**values)
        db.session.add(lead)
        db.session.commit()
        return lead

    return _make
