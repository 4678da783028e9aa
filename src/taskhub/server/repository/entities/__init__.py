"""
Domain entities for the repository layer.
"""

from .ai_usage_log import AIUsageLog
from .note import Note
from .notification import Notification
from .project import Project
from .project_member import ProjectMember
from .task import Task
from .todo import Todo
from .user import User

__all__ = [
    "AIUsageLog",
    "Note",
    "Notification",
    "Project",
    "ProjectMember",
    "Task",
    "Todo",
    "User",
]
