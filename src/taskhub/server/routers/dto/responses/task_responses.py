"""
Task response DTOs.
"""

from typing import List, Optional

from pydantic import Field

from .base_responses import BaseTimestampResponse


class TaskResponse(BaseTimestampResponse):
    """Response DTO for a task with joined project and user names."""

    id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    project_id: str
    assignee_id: Optional[str] = None
    creator_id: Optional[str] = None
    start_date: Optional[int] = None
    due_date: Optional[int] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    project_name: Optional[str] = None
    assignee_name: Optional[str] = None
    creator_name: Optional[str] = None
    created_at: int
    updated_at: int
