"""
Request DTOs for task endpoints.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DateInput = Union[int, str, None]
TagsInput = Union[List[str], str, None]


class CreateTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee_id: Optional[str] = Field(None, alias="assigneeId")
    start_date: DateInput = Field(None, alias="startDate")
    due_date: DateInput = Field(None, alias="dueDate")
    estimated_hours: Optional[float] = Field(None, ge=0, alias="estimatedHours")
    actual_hours: Optional[float] = Field(None, ge=0, alias="actualHours")
    tags: TagsInput = None
    dependencies: Optional[List[str]] = None


class UpdateTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee_id: Optional[str] = Field(None, alias="assigneeId")
    start_date: DateInput = Field(None, alias="startDate")
    due_date: DateInput = Field(None, alias="dueDate")
    estimated_hours: Optional[float] = Field(None, ge=0, alias="estimatedHours")
    actual_hours: Optional[float] = Field(None, ge=0, alias="actualHours")
    tags: TagsInput = None
    dependencies: Optional[List[str]] = None


class BatchUpdateStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_ids: List[str] = Field(..., min_length=1, alias="taskIds")
    status: str


class TaskFilter(BaseModel):
    """Domain model for filtering tasks across accessible projects."""

    project_id: Optional[str] = None
    assignee_id: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    search: Optional[str] = None
    overdue: bool = False
    sort_by: Literal["created_at", "updated_at", "due_date", "priority"] = "updated_at"
    sort_order: Literal["asc", "desc"] = "desc"
