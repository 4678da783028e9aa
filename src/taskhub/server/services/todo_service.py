"""
Business service for personal todos.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ...shared.api import PaginationParams
from ...shared.exceptions import EntityNotFoundError
from ...shared.utils import now_epoch_ms, to_epoch_ms
from ..repository.entities.todo import Todo, apply_completion_rules
from ..repository.interfaces import INoteRepository, ITodoRepository
from ..routers.dto.requests.todo_requests import TodoFilter
from ..utils.enum_mappings import map_priority, map_todo_status, require_mapped
from ..utils.text_utils import is_uuid
from .notification_service import NotificationService

log = logging.getLogger(__name__)


class TodoService:
    """Service layer for todo business logic. Every operation is scoped to one user."""

    def __init__(
        self,
        todo_repository: ITodoRepository,
        notification_service: NotificationService,
        note_repository: INoteRepository,
    ):
        self.todo_repository = todo_repository
        self.notification_service = notification_service
        self.note_repository = note_repository

    def _validate_note(self, user_id: str, note_id: Optional[str]) -> None:
        if note_id and not self.note_repository.find_by_id(note_id, user_id):
            raise EntityNotFoundError("Note", note_id)

    def _normalize_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        normalized = {k: v for k, v in data.items()}
        if "priority" in normalized:
            normalized["priority"] = require_mapped(normalized["priority"], map_priority, "priority")
            if normalized["priority"] is None:
                normalized.pop("priority")
        if "status" in normalized:
            normalized["status"] = require_mapped(normalized["status"], map_todo_status, "status")
            if normalized["status"] is None:
                normalized.pop("status")
        if "due_date" in normalized:
            normalized["due_date"] = to_epoch_ms(normalized["due_date"])
        if "completed" in normalized and normalized["completed"] is None:
            normalized.pop("completed")
        if "title" in normalized:
            title = (normalized["title"] or "").strip()
            if not title:
                raise ValueError("Todo title cannot be empty")
            normalized["title"] = title
        if "note_id" in normalized and not normalized["note_id"]:
            normalized["note_id"] = None
        return normalized

    def _prepare_create(self, user_id: str, todo_data: Dict[str, Any]) -> Dict[str, Any]:
        data = self._normalize_fields(todo_data)
        self._validate_note(user_id, data.get("note_id"))
        return apply_completion_rules(data, now_epoch_ms())

    def build_filter(
        self,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        note_id: Optional[str] = None,
        due_date_from: Optional[str] = None,
        due_date_to: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> TodoFilter:
        return TodoFilter(
            completed=completed,
            priority=require_mapped(priority, map_priority, "priority"),
            status=require_mapped(status, map_todo_status, "status"),
            note_id=note_id or None,
            due_date_from=to_epoch_ms(due_date_from),
            due_date_to=to_epoch_ms(due_date_to),
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    def list_todos(
        self, user_id: str, todo_filter: TodoFilter, pagination: PaginationParams
    ) -> Tuple[List[Todo], int]:
        return self.todo_repository.search(user_id, todo_filter, pagination)

    def search_todos(
        self, user_id: str, query: Optional[str], todo_filter: TodoFilter, pagination: PaginationParams
    ) -> Tuple[List[Todo], int]:
        if not query or not query.strip():
            raise ValueError("Search query is required")
        todo_filter = todo_filter.model_copy(update={"search": query.strip()})
        return self.todo_repository.search(user_id, todo_filter, pagination)

    def get_todo(self, todo_id: str, user_id: str) -> Todo:
        todo = self.todo_repository.find_by_id(todo_id, user_id)
        if not todo:
            raise EntityNotFoundError("Todo", todo_id)
        return todo

    def get_stats(self, user_id: str, now: Optional[int] = None) -> Dict[str, int]:
        now = now if now is not None else now_epoch_ms()
        todos = self.todo_repository.find_by_user(user_id)
        completed = sum(1 for t in todos if t.completed)
        return {
            "total": len(todos),
            "completed": completed,
            "pending": len(todos) - completed,
            "in_progress": sum(1 for t in todos if not t.completed and t.status == "in_progress"),
            "not_started": sum(1 for t in todos if not t.completed and t.status == "not_started"),
            "overdue": sum(
                1 for t in todos if not t.completed and t.due_date is not None and t.due_date < now
            ),
        }

    def export_todos(self, user_id: str) -> List[Todo]:
        return self.todo_repository.find_by_user(user_id)

    def create_todo(self, user_id: str, todo_data: Dict[str, Any]) -> Todo:
        todo = self.todo_repository.create(user_id, self._prepare_create(user_id, todo_data))
        log.info("Created todo %s for user %s", todo.id, user_id)
        return todo

    def create_todos(self, user_id: str, todos_data: List[Dict[str, Any]]) -> List[Todo]:
        if not todos_data:
            raise ValueError("At least one todo is required")
        return self.todo_repository.create_many(
            user_id, [self._prepare_create(user_id, data) for data in todos_data]
        )

    def update_todo(self, todo_id: str, user_id: str, update_data: Dict[str, Any]) -> Todo:
        """Apply a partial update. An empty update returns the todo unchanged."""
        existing = self.get_todo(todo_id, user_id)
        data = self._normalize_fields(update_data)
        if not data:
            return existing
        if "note_id" in data:
            self._validate_note(user_id, data["note_id"])

        data = apply_completion_rules(data, now_epoch_ms(), current_status=existing.status)
        updated = self.todo_repository.update(todo_id, user_id, data)
        if not updated:
            raise EntityNotFoundError("Todo", todo_id)
        return updated

    def update_todos(self, ids: List[str], user_id: str, update_data: Dict[str, Any]) -> List[Todo]:
        """Apply the same update to each of the user's todos among ``ids``."""
        updated = []
        for todo_id in dict.fromkeys(ids):
            if not self.todo_repository.find_by_id(todo_id, user_id):
                continue
            updated.append(self.update_todo(todo_id, user_id, update_data))
        return updated

    def toggle_todo(self, todo_id: str, user_id: str) -> Todo:
        if not is_uuid(todo_id):
            raise ValueError("Invalid todo id")
        todo = self.get_todo(todo_id, user_id)
        return self.update_todo(todo_id, user_id, {"completed": not todo.completed})

    def delete_todo(self, todo_id: str, user_id: str) -> None:
        self.get_todo(todo_id, user_id)
        self.notification_service.delete_todo_notifications(todo_id)
        self.todo_repository.delete(todo_id, user_id)
        log.info("Deleted todo %s", todo_id)

    def delete_todos(self, ids: List[str], user_id: str) -> List[str]:
        owned = [todo_id for todo_id in dict.fromkeys(ids) if self.todo_repository.find_by_id(todo_id, user_id)]
        for todo_id in owned:
            self.notification_service.delete_todo_notifications(todo_id)
        return self.todo_repository.delete_many(owned, user_id)
