import os
import sys

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

# Add the parent directory to the path to import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from env import Settings, get_settings
from main import app, get_db


@pytest.fixture
def db():
    """Fresh in-memory async database per test."""
    return AsyncMongoMockClient()["forum_test"]


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def client(db, settings):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
