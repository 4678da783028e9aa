"""
User domain entity.
"""

from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """User account. ``password_hash`` never leaves the service layer."""

    id: str
    email: str
    password_hash: str
    auth_provider: str = "local"
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: int
    updated_at: int

    def to_public_dict(self) -> dict:
        """User fields safe to return to clients or store on ``request.state``."""
        return self.model_dump(exclude={"password_hash"})
