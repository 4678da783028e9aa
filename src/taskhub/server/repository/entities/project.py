"""
Project domain entity.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Project(BaseModel):
    """Project domain entity, optionally nested under a parent project."""

    id: str
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: str = "planning"
    priority: str = "medium"
    parent_id: Optional[str] = None
    owner_id: str
    start_date: Optional[int] = None
    end_date: Optional[int] = None
    progress: float = 0
    tags: List[str] = Field(default_factory=list)
    created_at: int
    updated_at: int

    # Aggregates filled in by the service for list and detail views
    member_count: int = 0
    task_count: int = 0
    tasks_completed: int = 0
    user_role: Optional[str] = None

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id
