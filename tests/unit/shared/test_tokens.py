"""
Unit tests for JWT token minting, verification and duration parsing.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from taskhub.shared.auth import TokenManager, parse_duration
from taskhub.shared.exceptions import AuthenticationError


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,seconds",
        [("30s", 30), ("15m", 900), ("12h", 43200), ("7d", 604800), ("3600", 3600), (" 2H ", 7200)],
    )
    def test_valid_durations(self, value, seconds):
        assert parse_duration(value) == seconds

    @pytest.mark.parametrize("value", ["", "abc", "10x", "0", "-5m"])
    def test_invalid_durations(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestTokenManager:
    def setup_method(self):
        self.manager = TokenManager(secret="test-secret", expires_in="1h")

    def test_round_trip_carries_user_id_and_email(self):
        token = self.manager.create_token("user-1", "a@example.com")

        payload = self.manager.verify_token(token)

        assert payload["userId"] == "user-1"
        assert payload["email"] == "a@example.com"
        assert payload["exp"] - payload["iat"] == 3600

    def test_expired_token(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = self.manager.create_token("user-1", "a@example.com", now=issued)

        with pytest.raises(AuthenticationError, match="Token has expired"):
            self.manager.verify_token(token)

    def test_wrong_secret(self):
        token = TokenManager(secret="other-secret").create_token("user-1", "a@example.com")

        with pytest.raises(AuthenticationError, match="Invalid token"):
            self.manager.verify_token(token)

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            self.manager.verify_token("not.a.jwt")

    def test_token_without_user_id(self):
        token = jwt.encode({"email": "a@example.com"}, "test-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError, match="Invalid token"):
            self.manager.verify_token(token)
