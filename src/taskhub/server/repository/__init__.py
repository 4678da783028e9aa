"""
Repository layer: SQLAlchemy models, domain entities and data access.
"""

from .ai_usage_log_repository import AIUsageLogRepository
from .note_repository import NoteRepository
from .notification_repository import NotificationRepository
from .project_member_repository import ProjectMemberRepository
from .project_repository import ProjectRepository
from .task_repository import TaskRepository
from .todo_repository import TodoRepository
from .user_repository import UserRepository

__all__ = [
    "AIUsageLogRepository",
    "NoteRepository",
    "NotificationRepository",
    "ProjectMemberRepository",
    "ProjectRepository",
    "TaskRepository",
    "TodoRepository",
    "UserRepository",
]
