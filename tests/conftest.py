"""Fixtures shared by the test suite: an app on in-memory SQLite, its client and store"""

import pytest

from app import create_app
from config import Settings
from models import db
from store import SQLAlchemyPostStore


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", page_size_limit=10, secret_key="test")


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config.update(TESTING=True)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    with app.app_context():
        yield SQLAlchemyPostStore(db)
