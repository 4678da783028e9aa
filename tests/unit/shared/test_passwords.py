"""
Unit tests for password hashing and strength rules.
"""

from unittest.mock import patch

import pytest

from taskhub.shared.auth import hash_password, validate_password, verify_password


class TestHashing:
    @pytest.fixture(autouse=True)
    def fast_bcrypt(self):
        with patch("taskhub.shared.auth.passwords.SALT_ROUNDS", 4):
            yield

    def test_hash_verifies(self):
        hashed = hash_password("Secret#123")

        assert hashed != "Secret#123"
        assert verify_password("Secret#123", hashed)
        assert not verify_password("secret#123", hashed)

    def test_malformed_or_missing_hash(self):
        assert not verify_password("Secret#123", "not-a-bcrypt-hash")
        assert not verify_password("Secret#123", "")
        assert not verify_password("", hash_password("Secret#123"))


class TestValidatePassword:
    def test_strong_password(self):
        assert validate_password("Str0ng!pass") == (True, [])

    @pytest.mark.parametrize(
        "password,message",
        [
            ("Sh0rt!", "Password must be at least 8 characters long"),
            ("A1!" + "a" * 126, "Password must not exceed 128 characters"),
            ("UPPER123!", "Password must contain a lowercase letter"),
            ("lower123!", "Password must contain an uppercase letter"),
            ("NoDigits!!", "Password must contain a digit"),
            ("NoSpecial123", "Password must contain a special character"),
        ],
    )
    def test_each_rule_reports_its_own_message(self, password, message):
        is_valid, errors = validate_password(password)

        assert not is_valid
        assert errors == [message]

    def test_multiple_violations(self):
        is_valid, errors = validate_password("abc")
        assert not is_valid
        assert len(errors) == 4
