"""
Password hashing and strength validation.
"""

import re
from typing import List, Tuple

import bcrypt

SALT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128

_SPECIAL_CHARS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=SALT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


def validate_password(password: str) -> Tuple[bool, List[str]]:
    """
    Check a password against the strength rules.

    Returns:
        Tuple of (is_valid, list of human-readable rule violations)
    """
    errors: List[str] = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must not exceed {MAX_PASSWORD_LENGTH} characters")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain an uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain a digit")
    if not _SPECIAL_CHARS.search(password):
        errors.append("Password must contain a special character")

    return len(errors) == 0, errors
