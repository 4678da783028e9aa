"""
Functional tests for registration, login, profile and password endpoints.
"""

from datetime import datetime, timezone

import pytest

from taskhub.server import dependencies
from taskhub.server.repository import (
    NoteRepository,
    ProjectRepository,
    TodoRepository,
    UserRepository,
)
from taskhub.server.services.user_service import UserService
from taskhub.shared.auth import TokenManager


class TestRegistration:
    def test_register_returns_user_and_token(self, client):
        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@example.com", "password": "secret123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        user = body["data"]["user"]
        assert user["email"] == "alice@example.com"
        assert user["display_name"] == "alice"
        assert user["auth_provider"] == "local"
        assert "password_hash" not in user
        assert isinstance(user["created_at"], str)
        assert body["data"]["token"]

    def test_duplicate_email_is_rejected(self, client, make_user):
        make_user(username="alice", email="alice@example.com")

        response = client.post(
            "/api/auth/register",
            json={"username": "alice2", "email": "alice@example.com", "password": "secret123"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already registered"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "", "email": "bob@example.com", "password": "secret123"},
            {"username": "bob", "email": "not-an-email", "password": "secret123"},
            {"username": "bob", "email": "bob@example.com", "password": "short"},
            {"username": "x" * 31, "email": "bob@example.com", "password": "secret123"},
        ],
    )
    def test_invalid_payload_is_a_validation_error(self, client, payload):
        response = client.post("/api/auth/register", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Request validation failed"
        assert body["errors"]


class TestLogin:
    def test_login_with_valid_credentials(self, client, make_user):
        make_user(username="carol", email="carol@example.com")

        response = client.post(
            "/api/auth/login", json={"email": "carol@example.com", "password": "secret123"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "carol@example.com"
        assert data["token"]

    @pytest.mark.parametrize(
        "email,password",
        [("carol@example.com", "wrong-password"), ("nobody@example.com", "secret123")],
    )
    def test_bad_credentials_share_one_message(self, client, make_user, email, password):
        make_user(username="carol", email="carol@example.com")

        response = client.post("/api/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"


class TestCurrentUser:
    def test_me_returns_the_token_owner(self, client, owner):
        response = client.get("/api/auth/me", headers=owner["headers"])

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == owner["user"]["id"]

    def test_token_in_query_string_is_accepted(self, client, owner):
        response = client.get(f"/api/auth/me?token={owner['token']}")

        assert response.status_code == 200

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access token required"}

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_token_signed_with_another_secret(self, client, owner):
        forged = TokenManager(secret="other-secret").create_token(owner["user"]["id"], "x@example.com")

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_expired_token(self, client, owner):
        expired = TokenManager(secret="test-secret", expires_in="1h").create_token(
            owner["user"]["id"], owner["user"]["email"], now=datetime(2020, 1, 1, tzinfo=timezone.utc)
        )

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"

    def test_token_for_unknown_user(self, client):
        token = TokenManager(secret="test-secret").create_token("missing-user", "ghost@example.com")

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


class TestProfile:
    def test_update_display_name(self, client, owner):
        response = client.put(
            "/api/auth/profile", json={"username": "  Renamed  "}, headers=owner["headers"]
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["display_name"] == "Renamed"

    def test_blank_username_is_rejected(self, client, owner):
        response = client.put("/api/auth/profile", json={"username": "   "}, headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestChangePassword:
    def test_change_password_then_login_with_new_one(self, client, make_user):
        account = make_user(username="dave", email="dave@example.com")

        response = client.put(
            "/api/auth/password",
            json={"currentPassword": "secret123", "newPassword": "N3w-Passw0rd!"},
            headers=account["headers"],
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password changed successfully"

        old_login = client.post(
            "/api/auth/login", json={"email": "dave@example.com", "password": "secret123"}
        )
        new_login = client.post(
            "/api/auth/login", json={"email": "dave@example.com", "password": "N3w-Passw0rd!"}
        )
        assert old_login.status_code == 401
        assert new_login.status_code == 200

    def test_wrong_current_password(self, client, owner):
        response = client.put(
            "/api/auth/password",
            json={"currentPassword": "nope", "newPassword": "N3w-Passw0rd!"},
            headers=owner["headers"],
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    def test_weak_new_password_lists_violations(self, client, owner):
        response = client.put(
            "/api/auth/password",
            json={"currentPassword": "secret123", "newPassword": "weak"},
            headers=owner["headers"],
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Password does not meet requirements"
        assert "Password must contain an uppercase letter" in body["errors"]

    def test_missing_fields(self, client, owner):
        response = client.put("/api/auth/password", json={}, headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Current password and new password are required"


class TestAccountManagement:
    def _user_service(self, db):
        return UserService(UserRepository(db))

    def test_update_user_only_touches_profile_fields(self, client, owner):
        with dependencies.short_lived_session() as db:
            updated = self._user_service(db).update_user(
                owner["user"]["id"], {"display_name": "Owner", "email": "other@example.com"}
            )

        assert updated.display_name == "Owner"
        assert updated.email == owner["user"]["email"]
        me = client.get("/api/auth/me", headers=owner["headers"]).json()["data"]["user"]
        assert me["display_name"] == "Owner"

    def test_update_unknown_user(self, client):
        with dependencies.short_lived_session() as db:
            assert self._user_service(db).update_user("missing", {"display_name": "X"}) is None

    def test_delete_user_removes_owned_data(self, client, owner, outsider, make_project):
        client.post("/api/todos", json={"title": "Buy milk"}, headers=owner["headers"])
        client.post("/api/notes", json={"title": "Groceries"}, headers=owner["headers"])
        project = make_project(owner["headers"])
        client.post("/api/todos", json={"title": "Keep me"}, headers=outsider["headers"])

        with dependencies.short_lived_session() as db:
            assert self._user_service(db).delete_user(owner["user"]["id"]) is True
            assert self._user_service(db).delete_user(owner["user"]["id"]) is False

        with dependencies.short_lived_session() as db:
            assert TodoRepository(db).find_by_user(owner["user"]["id"]) == []
            assert NoteRepository(db).find_by_user(owner["user"]["id"]) == []
            assert ProjectRepository(db).find_by_id(project["id"]) is None
            assert len(TodoRepository(db).find_by_user(outsider["user"]["id"])) == 1

        assert client.get("/api/auth/me", headers=owner["headers"]).status_code == 401
