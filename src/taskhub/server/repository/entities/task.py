"""
Task domain entity.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Task(BaseModel):
    """A unit of work inside a project."""

    id: str
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: str = "todo"
    priority: str = "medium"
    project_id: str
    assignee_id: Optional[str] = None
    creator_id: Optional[str] = None
    start_date: Optional[int] = None
    due_date: Optional[int] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    created_at: int
    updated_at: int

    project_name: Optional[str] = None
    assignee_name: Optional[str] = None
    creator_name: Optional[str] = None

    def is_completed(self) -> bool:
        return self.status == "completed"

    def is_overdue(self, now_ms: int) -> bool:
        return self.due_date is not None and self.due_date < now_ms and not self.is_completed()
