"""
SQLAlchemy models for database persistence.
"""

from .base import Base
from .user_model import UserModel
from .project_model import ProjectModel
from .project_member_model import ProjectMemberModel
from .task_model import TaskModel
from .note_model import NoteModel
from .todo_model import TodoModel
from .notification_model import NotificationModel
from .ai_usage_log_model import AIUsageLogModel

__all__ = [
    "Base",
    "UserModel",
    "ProjectModel",
    "ProjectMemberModel",
    "TaskModel",
    "NoteModel",
    "TodoModel",
    "NotificationModel",
    "AIUsageLogModel",
]
