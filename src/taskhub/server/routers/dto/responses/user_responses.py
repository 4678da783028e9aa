"""
User and auth response DTOs.
"""

from typing import Optional

from pydantic import BaseModel

from .base_responses import BaseTimestampResponse


class UserResponse(BaseTimestampResponse):
    id: str
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    auth_provider: str = "local"
    created_at: int
    updated_at: int


class AuthResponse(BaseModel):
    """Returned by register and login."""

    user: UserResponse
    token: str


class UserSummaryResponse(BaseModel):
    """A user as shown in member search results."""

    id: str
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
