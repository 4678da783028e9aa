"""
Notification domain entity.
"""

from typing import Optional

from pydantic import BaseModel


class Notification(BaseModel):
    id: str
    user_id: str
    todo_id: Optional[str] = None
    type: str
    title: str
    message: str
    is_read: bool = False
    created_at: int
    updated_at: int

    # Joined from the related todo
    todo_title: Optional[str] = None
    todo_due_date: Optional[int] = None
