"""
Request DTOs for notification endpoints.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

NotificationType = Literal["one_day", "three_hours", "five_minutes", "immediate"]


class CreateNotificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    todo_id: Optional[str] = Field(None, alias="todoId")
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
