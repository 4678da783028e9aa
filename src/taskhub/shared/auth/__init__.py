"""
Authentication primitives: password hashing, JWT tokens and user dependencies.
"""

from .dependencies import extract_access_token, get_current_user
from .passwords import hash_password, validate_password, verify_password
from .tokens import TokenManager, parse_duration

__all__ = [
    "extract_access_token",
    "get_current_user",
    "hash_password",
    "validate_password",
    "verify_password",
    "TokenManager",
    "parse_duration",
]
