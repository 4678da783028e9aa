"""
Pytest fixtures for FastAPI functional testing.

Each test gets a fresh application bound to an in-memory SQLite database,
driven through a TestClient so the lifespan (database setup, services,
scheduler wiring) runs exactly as in production.
"""

import itertools
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from taskhub.server.config import load_app_config
from taskhub.server.main import create_app

TEST_PASSWORD = "secret123"

BASE_ENVIRON = {
    "DATABASE_URL": "sqlite://",
    "JWT_SECRET": "test-secret",
    "SCHEDULER_ENABLED": "false",
    "RUN_MIGRATIONS": "false",
    "RATE_LIMIT_MAX": "10000",
}


@pytest.fixture(autouse=True)
def fast_password_hashing():
    with patch("taskhub.shared.auth.passwords.SALT_ROUNDS", 4):
        yield


@pytest.fixture
def config_factory():
    """Build an AppConfig from the test environment plus overrides."""

    def _build(**environ):
        values = dict(BASE_ENVIRON)
        values.update(environ)
        return load_app_config(environ=values, use_dotenv=False)

    return _build


@pytest.fixture
def app_config(config_factory):
    return config_factory()


@pytest.fixture
def app(app_config):
    return create_app(app_config)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    """
    Register users through the API.

    Returns a callable producing ``{"user", "token", "headers"}``.
    """
    counter = itertools.count(1)

    def _make(username=None, email=None, password=TEST_PASSWORD):
        username = username or f"user{next(counter)}"
        email = email or f"{username}@example.com"
        response = client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "user": data["user"],
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _make


@pytest.fixture
def owner(make_user):
    return make_user(username="owner")


@pytest.fixture
def outsider(make_user):
    return make_user(username="outsider")


@pytest.fixture
def make_project(client):
    def _make(headers, **fields):
        body = {"name": "Website relaunch"}
        body.update(fields)
        response = client.post("/api/projects", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_task(client):
    def _make(headers, project_id, **fields):
        body = {"title": "Draft copy"}
        body.update(fields)
        response = client.post(f"/api/projects/{project_id}/tasks", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
