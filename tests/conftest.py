"""Pytest configuration: settings for the test process and app/store fixtures."""
import os

# Settings are read (and cached) on first import of the app, so set them first
os.environ.setdefault("JWT_SECRET_KEY", "test_secret_key_for_pytest_only_not_for_production_use")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from healthcare_backend.config import get_settings
from healthcare_backend.database import Database
from healthcare_backend.main import create_app

from .helpers import register


@pytest.fixture
def database(tmp_path):
    return Database(f"sqlite+aiosqlite:///{tmp_path / 'healthcare_test.db'}")


@pytest.fixture
def app(database):
    return create_app(settings=get_settings(), database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def alice(client):
    return register(client)


@pytest.fixture
def bob(client):
    return register(client, name="Bob Jones", email="bob@example.com")


@pytest.fixture
async def store(database):
    """The schema store on its own, for service-level tests."""
    await database.create_all()
    yield database
    await database.dispose()
