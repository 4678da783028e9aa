"""
Request DTOs for project-related API endpoints.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DateInput = Union[int, str, None]
TagsInput = Union[List[str], str, None]


class CreateProjectRequest(BaseModel):
    """Request to create a new project."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    status: Optional[str] = Field(None, description="Status value or label")
    priority: Optional[str] = Field(None, description="Priority value or label")
    parent_id: Optional[str] = Field(None, alias="parentId")
    start_date: DateInput = Field(None, alias="startDate")
    end_date: DateInput = Field(None, alias="endDate")
    tags: TagsInput = None


class UpdateProjectRequest(BaseModel):
    """Request to update an existing project. Only fields that are sent are applied."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    parent_id: Optional[str] = Field(None, alias="parentId")
    start_date: DateInput = Field(None, alias="startDate")
    end_date: DateInput = Field(None, alias="endDate")
    progress: Optional[float] = Field(None, ge=0, le=100)
    tags: TagsInput = None


class ProjectFilter(BaseModel):
    """Domain model for filtering projects."""

    user_id: str
    status: Optional[str] = None
    priority: Optional[str] = None
    parent_id: Optional[str] = None
    root_only: bool = False
    search: Optional[str] = None


class AddMemberRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    role: Optional[str] = None


class BatchAddMembersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: List[str] = Field(..., min_length=1, alias="userIds")
    role: Optional[str] = None


class UpdateMemberRoleRequest(BaseModel):
    role: str
