"""
Todo domain entity.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Todo(BaseModel):
    """A personal todo with an optional due date and note link."""

    id: str
    user_id: str
    note_id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[int] = None
    priority: str = "medium"
    status: str = "not_started"
    completed: bool = False
    completed_at: Optional[int] = None
    created_at: int
    updated_at: int


def apply_completion_rules(updates: Dict[str, Any], now_ms: int, current_status: Optional[str] = None) -> Dict[str, Any]:
    """
    Keep ``completed``, ``completed_at`` and ``status`` consistent in an update.

    Marking a todo completed stamps ``completed_at`` and sets the status to
    completed. Un-completing clears ``completed_at`` and moves a completed
    status back to not_started. Setting the status to completed marks the
    todo completed.
    """
    result = dict(updates)
    if result.get("status") == "completed" and "completed" not in result:
        result["completed"] = True

    if "completed" in result:
        if result["completed"]:
            result["completed_at"] = now_ms
            result["status"] = "completed"
        else:
            result["completed_at"] = None
            status = result.get("status", current_status)
            if status == "completed":
                result["status"] = "not_started"
    return result
