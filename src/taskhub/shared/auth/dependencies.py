"""
FastAPI dependencies for the authenticated user.

The auth middleware resolves the bearer token and stores the user on
``request.state.user``; these dependencies enforce its presence.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status

from ..utils.types import CurrentUser

log = logging.getLogger(__name__)


def extract_access_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None

    if "token" in request.query_params:
        return request.query_params["token"] or None

    return None


async def get_current_user(request: Request) -> CurrentUser:
    """Return the authenticated user or reject the request with 401."""
    user = getattr(request.state, "user", None)
    if not user:
        log.debug("Unauthenticated request to %s", request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=getattr(request.state, "auth_error", None) or "Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

