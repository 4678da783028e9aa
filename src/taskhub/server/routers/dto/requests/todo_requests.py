"""
Request DTOs for todo endpoints.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DateInput = Union[int, str, None]


class CreateTodoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: DateInput = Field(None, alias="dueDate")
    priority: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None
    note_id: Optional[str] = Field(None, alias="noteId")


class UpdateTodoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: DateInput = Field(None, alias="dueDate")
    priority: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None
    note_id: Optional[str] = Field(None, alias="noteId")


class BatchCreateTodosRequest(BaseModel):
    todos: List[CreateTodoRequest]


class BatchUpdateTodosRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)
    data: UpdateTodoRequest


class BatchDeleteTodosRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class TodoFilter(BaseModel):
    """Domain model for filtering a user's todos."""

    completed: Optional[bool] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    note_id: Optional[str] = None
    due_date_from: Optional[int] = None
    due_date_to: Optional[int] = None
    search: Optional[str] = None
    sort_by: Literal["created_at", "updated_at", "due_date", "priority"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
