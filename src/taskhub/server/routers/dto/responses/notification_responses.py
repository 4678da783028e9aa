"""
Notification response DTOs.
"""

from typing import Optional

from .base_responses import BaseTimestampResponse


class NotificationResponse(BaseTimestampResponse):
    id: str
    user_id: str
    todo_id: Optional[str] = None
    type: str
    title: str
    message: str
    is_read: bool
    todo_title: Optional[str] = None
    todo_due_date: Optional[int] = None
    created_at: int
    updated_at: int
