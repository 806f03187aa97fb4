"""
Shared fixtures: a temporary on-disk database, settings, and an app client.
"""
import os
import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient

from planner.app import create_app
from planner.config import Settings
from planner.database import PlannerDatabase
from planner.services.token_service import TokenService
from planner.storage.repositories import TaskRepository, UserRepository

TEST_SECRET = "test-secret-for-planner"


@pytest.fixture
def temp_dir():
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def temp_db(temp_dir):
    """Create a temporary database for testing."""
    return PlannerDatabase(os.path.join(temp_dir, "test.db"))


@pytest.fixture
def users(temp_db):
    return UserRepository(temp_db)


@pytest.fixture
def tasks(temp_db):
    return TaskRepository(temp_db)


@pytest.fixture
def owner(users):
    """A persisted user that owns tasks."""
    return users.create(email="owner@example.com", name="Owner", external_id="google-owner", verified=True)


@pytest.fixture
def other_owner(users):
    return users.create(email="other@example.com", name="Other", external_id="google-other")


@pytest.fixture
def settings(temp_dir):
    return Settings(
        jwt_secret=TEST_SECRET,
        google_client_id="test-client-id.apps.googleusercontent.com",
        db_path=os.path.join(temp_dir, "app.db"),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET)


@pytest.fixture
def app_user(app):
    """A user persisted in the app's own database."""
    return UserRepository(app.state.services.db).create(
        email="alice@example.com", name="Alice", external_id="google-alice", verified=True
    )


@pytest.fixture
def auth_headers(app, app_user):
    token = app.state.services.token_service.issue(app_user)
    return {"Authorization": f"Bearer {token}"}
