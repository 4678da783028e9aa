"""
Request DTOs for authentication and profile endpoints.
"""

import re
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _validate_email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError("Invalid email address")
    return value


Email = Annotated[str, AfterValidator(_validate_email)]


class RegisterRequest(BaseModel):
    """Request to register a new local account."""

    username: str = Field(..., min_length=1, max_length=30, description="Public display name")
    email: Email = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    username: Optional[str] = Field(None, max_length=30)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")
