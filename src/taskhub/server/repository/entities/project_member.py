"""
Project member domain entity.
"""

from typing import Optional

from pydantic import BaseModel


class ProjectMember(BaseModel):
    """A user's membership in a project with its role."""

    id: str
    project_id: str
    user_id: str
    role: str = "member"
    joined_at: int

    # Joined user details
    user_email: Optional[str] = None
    user_display_name: Optional[str] = None
