"""
Repository interfaces defining contracts for data access.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ...shared.api import PaginationParams
from .entities import AIUsageLog, Note, Notification, Project, ProjectMember, Task, Todo, User

if TYPE_CHECKING:
    from ..routers.dto.requests.note_requests import NoteFilter
    from ..routers.dto.requests.project_requests import ProjectFilter
    from ..routers.dto.requests.task_requests import TaskFilter
    from ..routers.dto.requests.todo_requests import TodoFilter


class IUserRepository(ABC):
    """Interface for user account data access."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def find_by_ids(self, user_ids: Sequence[str]) -> List[User]:
        pass

    @abstractmethod
    def create(
        self,
        email: str,
        password_hash: str,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        auth_provider: str = "local",
    ) -> User:
        pass

    @abstractmethod
    def update(self, user_id: str, update_data: dict) -> Optional[User]:
        """Update display_name and/or avatar_url."""
        pass

    @abstractmethod
    def update_password(self, user_id: str, password_hash: str) -> bool:
        pass

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        pass

    @abstractmethod
    def search(self, query: str, exclude_ids: Sequence[str] = (), limit: int = 10) -> List[User]:
        pass


class IProjectRepository(ABC):
    """Interface for project data access operations."""

    @abstractmethod
    def create(self, owner_id: str, project_data: dict) -> Project:
        pass

    @abstractmethod
    def find_by_id(self, project_id: str) -> Optional[Project]:
        pass

    @abstractmethod
    def find_by_ids(self, project_ids: Sequence[str]) -> List[Project]:
        pass

    @abstractmethod
    def find_accessible_ids(self, user_id: str) -> List[str]:
        """Ids of projects the user owns or is a member of."""
        pass

    @abstractmethod
    def get_filtered_projects(
        self, project_filter: "ProjectFilter", pagination: Optional[PaginationParams] = None
    ) -> Tuple[List[Project], int]:
        pass

    @abstractmethod
    def find_children(self, project_id: str) -> List[Project]:
        pass

    @abstractmethod
    def find_all_ids(self) -> List[str]:
        pass

    @abstractmethod
    def count_tasks(self, project_id: str) -> Tuple[int, int]:
        pass

    @abstractmethod
    def count_members(self, project_id: str) -> int:
        pass

    @abstractmethod
    def update(self, project_id: str, update_data: dict) -> Optional[Project]:
        pass

    @abstractmethod
    def update_progress(self, project_id: str, progress: float) -> bool:
        pass

    @abstractmethod
    def delete(self, project_id: str) -> bool:
        pass


class IProjectMemberRepository(ABC):
    """Interface for project membership data access."""

    @abstractmethod
    def find_by_project(self, project_id: str) -> List[ProjectMember]:
        pass

    @abstractmethod
    def find_recent(self, project_id: str, limit: int = 5) -> List[ProjectMember]:
        pass

    @abstractmethod
    def find_by_id(self, member_id: str) -> Optional[ProjectMember]:
        pass

    @abstractmethod
    def find_membership(self, project_id: str, user_id: str) -> Optional[ProjectMember]:
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> List[ProjectMember]:
        pass

    @abstractmethod
    def find_role(self, project_id: str, user_id: str) -> Optional[str]:
        pass

    @abstractmethod
    def find_user_ids(self, project_id: str) -> List[str]:
        pass

    @abstractmethod
    def add(self, project_id: str, user_id: str, role: str = "member") -> ProjectMember:
        pass

    @abstractmethod
    def update_role(self, member_id: str, role: str) -> Optional[ProjectMember]:
        pass

    @abstractmethod
    def delete(self, member_id: str) -> bool:
        pass


class ITaskRepository(ABC):
    """Interface for task data access operations."""

    @abstractmethod
    def create(self, project_id: str, creator_id: str, task_data: dict) -> Task:
        pass

    @abstractmethod
    def find_by_id(self, task_id: str) -> Optional[Task]:
        pass

    @abstractmethod
    def find_by_ids(self, task_ids: Sequence[str]) -> List[Task]:
        pass

    @abstractmethod
    def find_by_projects(self, project_ids: Sequence[str]) -> List[Task]:
        pass

    @abstractmethod
    def search(
        self,
        project_ids: Sequence[str],
        task_filter: "TaskFilter",
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Task], int]:
        pass

    @abstractmethod
    def update(self, task_id: str, update_data: dict) -> Optional[Task]:
        pass

    @abstractmethod
    def update_status_many(self, task_ids: Sequence[str], status: str) -> int:
        pass

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        pass


class ITodoRepository(ABC):
    """Interface for todo data access operations."""

    @abstractmethod
    def create(self, user_id: str, todo_data: dict) -> Todo:
        pass

    @abstractmethod
    def create_many(self, user_id: str, todos_data: Sequence[dict]) -> List[Todo]:
        pass

    @abstractmethod
    def find_by_id(self, todo_id: str, user_id: Optional[str] = None) -> Optional[Todo]:
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> List[Todo]:
        pass

    @abstractmethod
    def find_pending_with_due_date(self) -> List[Todo]:
        pass

    @abstractmethod
    def search(
        self,
        user_id: str,
        todo_filter: "TodoFilter",
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Todo], int]:
        pass

    @abstractmethod
    def update(self, todo_id: str, user_id: str, update_data: dict) -> Optional[Todo]:
        pass

    @abstractmethod
    def delete(self, todo_id: str, user_id: str) -> bool:
        pass

    @abstractmethod
    def delete_many(self, todo_ids: Sequence[str], user_id: str) -> List[str]:
        pass

    @abstractmethod
    def count_completed(self, user_id: str) -> Tuple[int, int]:
        pass


class INoteRepository(ABC):
    """Interface for note data access operations."""

    @abstractmethod
    def create(self, user_id: str, note_data: dict) -> Note:
        pass

    @abstractmethod
    def find_by_id(self, note_id: str, user_id: str) -> Optional[Note]:
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> List[Note]:
        pass

    @abstractmethod
    def find_with_embeddings(self, user_id: str) -> List[Note]:
        pass

    @abstractmethod
    def search(
        self,
        user_id: str,
        note_filter: "NoteFilter",
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Note], int]:
        pass

    @abstractmethod
    def count_by_date_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        pass

    @abstractmethod
    def count_flags(self, user_id: str) -> Tuple[int, int, int]:
        pass

    @abstractmethod
    def update(self, note_id: str, user_id: str, update_data: dict) -> Optional[Note]:
        pass

    @abstractmethod
    def delete(self, note_id: str, user_id: str) -> bool:
        pass


class INotificationRepository(ABC):
    """Interface for notification data access operations."""

    @abstractmethod
    def create(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        todo_id: Optional[str] = None,
    ) -> Notification:
        pass

    @abstractmethod
    def find_by_user(
        self,
        user_id: str,
        is_read: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Notification], int]:
        pass

    @abstractmethod
    def count_unread(self, user_id: str) -> int:
        pass

    @abstractmethod
    def exists_for_todo(self, todo_id: str, notification_type: str) -> bool:
        pass

    @abstractmethod
    def mark_read(self, notification_id: str, user_id: str) -> bool:
        pass

    @abstractmethod
    def mark_all_read(self, user_id: str) -> int:
        pass

    @abstractmethod
    def delete_by_todo(self, todo_id: str) -> int:
        pass

    @abstractmethod
    def delete_read_before(self, cutoff_ms: int, user_id: Optional[str] = None) -> int:
        pass


class IAIUsageLogRepository(ABC):
    """Interface for AI usage log data access."""

    @abstractmethod
    def create(
        self,
        user_id: str,
        action_type: str,
        model_name: Optional[str] = None,
        input_tokens: int = 0,
        output_tokens: int = 0,
        cost_cents: int = 0,
    ) -> AIUsageLog:
        pass

    @abstractmethod
    def find_by_user(
        self,
        user_id: str,
        action_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[AIUsageLog]:
        pass

    @abstractmethod
    def find_in_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> List[AIUsageLog]:
        pass

    @abstractmethod
    def count_by_date_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        pass
