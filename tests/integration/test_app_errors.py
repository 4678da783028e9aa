"""
Functional tests for application wiring: health checks, the error envelope,
request middleware and startup options.
"""

import pytest
from fastapi.testclient import TestClient

from taskhub.server.main import create_app


def _client_for(config):
    return TestClient(create_app(config))


class TestHealth:
    def test_root_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert "timestamp" in body
        assert body["uptime"] >= 0

    def test_api_health(self, client):
        response = client.get("/api/health")

        assert response.json()["success"] is True
        assert response.json()["message"] == "TaskHub API is running"


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    def test_validation_errors_are_listed(self, client):
        response = client.post("/api/auth/register", json={"username": "a"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Request validation failed"
        assert any(error.startswith("email") for error in body["errors"])

    def test_missing_token(self, client):
        response = client.get("/api/todos")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access token required"}


class TestDefaultUser:
    def test_anonymous_requests_use_default_user(self, config_factory):
        config = config_factory(AUTH_ALLOW_DEFAULT_USER="true")

        with _client_for(config) as client:
            first = client.get("/api/auth/me")
            second = client.get("/api/auth/me")

        assert first.status_code == 200
        user = first.json()["data"]["user"]
        assert user["email"] == "admin@localhost"
        assert second.json()["data"]["user"]["id"] == user["id"]

    def test_invalid_token_falls_back_to_default_user(self, config_factory):
        config = config_factory(AUTH_ALLOW_DEFAULT_USER="true")

        with _client_for(config) as client:
            response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "admin@localhost"


class TestMigrations:
    def test_startup_with_migrations(self, config_factory):
        config = config_factory(RUN_MIGRATIONS="true")

        with _client_for(config) as client:
            registered = client.post(
                "/api/auth/register",
                json={"username": "migrated", "email": "migrated@example.com", "password": "secret123"},
            )
            headers = {"Authorization": f"Bearer {registered.json()['data']['token']}"}
            project = client.post("/api/projects", json={"name": "Schema check"}, headers=headers)

        assert registered.status_code == 201
        assert project.status_code == 201


class TestRequestLimits:
    def test_rate_limit(self, config_factory):
        config = config_factory(RATE_LIMIT_MAX="2")

        with _client_for(config) as client:
            statuses = [client.get("/api/todos").status_code for _ in range(3)]
            limited = client.get("/api/todos")
            health = client.get("/api/health")

        assert statuses == [401, 401, 429]
        assert limited.json() == {"success": False, "message": "Too many requests, please try again later"}
        assert limited.headers["ratelimit-limit"] == "2"
        assert "retry-after" in limited.headers
        assert health.status_code == 200

    def test_oversized_body(self, config_factory):
        config = config_factory(MAX_BODY_BYTES="64")

        with _client_for(config) as client:
            response = client.post("/api/auth/login", content=b"x" * 128, headers={"Content-Type": "application/json"})

        assert response.status_code == 413
        assert response.json() == {"success": False, "message": "Request body too large"}


class TestErrorStack:
    @pytest.mark.parametrize(
        "environment,shows_stack",
        [("development", True), ("test", False), ("staging", False), ("production", False)],
    )
    def test_stack_is_only_shown_in_development(self, config_factory, environment, shows_stack):
        app = create_app(config_factory(APP_ENV=environment))

        @app.get("/explode")
        def explode():
            raise RuntimeError("boom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/explode")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Internal server error"
        assert ("stack" in body) is shows_stack
        if shows_stack:
            assert "RuntimeError: boom" in body["stack"]
