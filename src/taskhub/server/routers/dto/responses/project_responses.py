"""
Project and project member response DTOs.
"""

from typing import List, Optional

from pydantic import Field

from .base_responses import BaseTimestampResponse


class ProjectResponse(BaseTimestampResponse):
    """Response DTO for a project, including task and member aggregates."""

    id: str
    name: str
    description: Optional[str] = None
    status: str
    priority: str
    parent_id: Optional[str] = None
    owner_id: str
    start_date: Optional[int] = None
    end_date: Optional[int] = None
    progress: float = 0
    tags: List[str] = Field(default_factory=list)
    member_count: int = 0
    task_count: int = 0
    tasks_completed: int = 0
    user_role: Optional[str] = None
    created_at: int
    updated_at: int


class ProjectTreeNodeResponse(ProjectResponse):
    children: List["ProjectTreeNodeResponse"] = Field(default_factory=list)


class ProjectMemberResponse(BaseTimestampResponse):
    id: str
    project_id: str
    user_id: str
    role: str
    joined_at: int
    user_email: Optional[str] = None
    user_display_name: Optional[str] = None
