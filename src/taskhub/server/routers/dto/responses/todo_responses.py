"""
Todo response DTOs.
"""

from typing import Optional

from .base_responses import BaseTimestampResponse


class TodoResponse(BaseTimestampResponse):
    id: str
    user_id: str
    note_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    due_date: Optional[int] = None
    priority: str
    status: str
    completed: bool
    completed_at: Optional[int] = None
    created_at: int
    updated_at: int
