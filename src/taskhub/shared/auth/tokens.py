"""
JWT access token minting and verification.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ..exceptions import AuthenticationError

log = logging.getLogger(__name__)

ALGORITHM = "HS256"

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> int:
    """
    Parse a duration such as "30s", "15m", "12h" or "7d" into seconds.

    Bare numbers are treated as seconds.

    Raises:
        ValueError: If the duration is malformed or not positive
    """
    text = str(value).strip().lower()
    if not text:
        raise ValueError("Duration cannot be empty")

    unit = text[-1]
    if unit in _DURATION_UNITS:
        number, multiplier = text[:-1], _DURATION_UNITS[unit]
    else:
        number, multiplier = text, 1

    try:
        seconds = int(number) * multiplier
    except ValueError:
        raise ValueError(f"Invalid duration: {value!r}") from None
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


class TokenManager:
    """Signs and verifies bearer tokens carrying ``{userId, email}``."""

    def __init__(self, secret: str, expires_in: str = "7d"):
        self.secret = secret
        self.expires_in_seconds = parse_duration(expires_in)

    def create_token(self, user_id: str, email: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expires_in_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a token's signature and expiry.

        Raises:
            AuthenticationError: If the token is expired, malformed or lacks a user id
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired") from None
        except jwt.InvalidTokenError as e:
            log.debug("Rejected bearer token: %s", e)
            raise AuthenticationError("Invalid token") from None

        if not payload.get("userId"):
            raise AuthenticationError("Invalid token")
        return payload
