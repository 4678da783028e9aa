"""
Response DTOs for API endpoints.
"""

from .ai_responses import AIUsageLogResponse
from .base_responses import BaseTimestampResponse
from .note_responses import NoteResponse
from .notification_responses import NotificationResponse
from .project_responses import ProjectMemberResponse, ProjectResponse, ProjectTreeNodeResponse
from .task_responses import TaskResponse
from .todo_responses import TodoResponse
from .user_responses import AuthResponse, UserResponse, UserSummaryResponse

__all__ = [
    "BaseTimestampResponse",
    # User responses
    "UserResponse",
    "AuthResponse",
    "UserSummaryResponse",
    # Project responses
    "ProjectResponse",
    "ProjectTreeNodeResponse",
    "ProjectMemberResponse",
    # Work items
    "TaskResponse",
    "TodoResponse",
    "NoteResponse",
    "NotificationResponse",
    "AIUsageLogResponse",
]
