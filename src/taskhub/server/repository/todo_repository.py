"""
Repository implementation for todo data access operations.
"""

import uuid
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from ...shared.api import PaginationParams
from ..routers.dto.requests.todo_requests import TodoFilter
from .entities.todo import Todo
from .interfaces import ITodoRepository
from .models import TodoModel

_PRIORITY_ORDER = case(
    (TodoModel.priority == "high", 3),
    (TodoModel.priority == "medium", 2),
    (TodoModel.priority == "low", 1),
    else_=0,
)

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "due_date",
    "priority",
    "status",
    "completed",
    "completed_at",
    "note_id",
)


class TodoRepository(ITodoRepository):
    """SQLAlchemy implementation of todo repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def _build_model(self, user_id: str, todo_data: dict, now: int) -> TodoModel:
        return TodoModel(
            id=str(uuid.uuid4()),
            user_id=user_id,
            note_id=todo_data.get("note_id"),
            title=todo_data["title"],
            description=todo_data.get("description"),
            due_date=todo_data.get("due_date"),
            priority=todo_data.get("priority") or "medium",
            status=todo_data.get("status") or "not_started",
            completed=bool(todo_data.get("completed", False)),
            completed_at=todo_data.get("completed_at"),
            created_at=now,
            updated_at=now,
        )

    def create(self, user_id: str, todo_data: dict) -> Todo:
        model = self._build_model(user_id, todo_data, now_epoch_ms())
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def create_many(self, user_id: str, todos_data: Sequence[dict]) -> List[Todo]:
        now = now_epoch_ms()
        models = [self._build_model(user_id, data, now) for data in todos_data]
        self.db.add_all(models)
        self.db.commit()
        for model in models:
            self.db.refresh(model)
        return [self._model_to_entity(m) for m in models]

    def find_by_id(self, todo_id: str, user_id: Optional[str] = None) -> Optional[Todo]:
        query = self.db.query(TodoModel).filter(TodoModel.id == todo_id)
        if user_id is not None:
            query = query.filter(TodoModel.user_id == user_id)
        model = query.first()
        return self._model_to_entity(model) if model else None

    def find_by_user(self, user_id: str) -> List[Todo]:
        models = (
            self.db.query(TodoModel)
            .filter(TodoModel.user_id == user_id)
            .order_by(TodoModel.created_at.desc())
            .all()
        )
        return [self._model_to_entity(m) for m in models]

    def find_pending_with_due_date(self) -> List[Todo]:
        """Incomplete todos that have a due date, across all users."""
        models = (
            self.db.query(TodoModel)
            .filter(TodoModel.completed.is_(False), TodoModel.due_date.isnot(None))
            .all()
        )
        return [self._model_to_entity(m) for m in models]

    def search(
        self,
        user_id: str,
        todo_filter: TodoFilter,
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Todo], int]:
        query = self.db.query(TodoModel).filter(TodoModel.user_id == user_id)

        if todo_filter.completed is not None:
            query = query.filter(TodoModel.completed.is_(todo_filter.completed))
        if todo_filter.priority:
            query = query.filter(TodoModel.priority == todo_filter.priority)
        if todo_filter.status:
            query = query.filter(TodoModel.status == todo_filter.status)
        if todo_filter.note_id:
            query = query.filter(TodoModel.note_id == todo_filter.note_id)
        if todo_filter.due_date_from is not None:
            query = query.filter(TodoModel.due_date >= todo_filter.due_date_from)
        if todo_filter.due_date_to is not None:
            query = query.filter(TodoModel.due_date <= todo_filter.due_date_to)
        if todo_filter.search:
            pattern = f"%{todo_filter.search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(TodoModel.title).like(pattern),
                    func.lower(TodoModel.description).like(pattern),
                )
            )

        total = query.count()

        descending = todo_filter.sort_order == "desc"
        if todo_filter.sort_by == "priority":
            column = _PRIORITY_ORDER
            query = query.order_by(column.desc() if descending else column.asc())
        elif todo_filter.sort_by == "due_date":
            # Nulls last in both directions
            column = TodoModel.due_date
            query = query.order_by(
                TodoModel.due_date.is_(None).asc(),
                column.desc() if descending else column.asc(),
            )
        else:
            column = getattr(TodoModel, todo_filter.sort_by)
            query = query.order_by(column.desc() if descending else column.asc())
        query = query.order_by(TodoModel.id.asc())

        if pagination:
            query = query.offset(pagination.offset).limit(pagination.limit)
        return [self._model_to_entity(m) for m in query.all()], total

    def update(self, todo_id: str, user_id: str, update_data: dict) -> Optional[Todo]:
        model = (
            self.db.query(TodoModel)
            .filter(TodoModel.id == todo_id, TodoModel.user_id == user_id)
            .first()
        )
        if not model:
            return None

        for field in _UPDATABLE_FIELDS:
            if field in update_data:
                setattr(model, field, update_data[field])

        model.updated_at = now_epoch_ms()
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def delete(self, todo_id: str, user_id: str) -> bool:
        result = (
            self.db.query(TodoModel)
            .filter(TodoModel.id == todo_id, TodoModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return result > 0

    def delete_many(self, todo_ids: Sequence[str], user_id: str) -> List[str]:
        """Delete the user's todos among the given ids and return the ids deleted."""
        if not todo_ids:
            return []
        owned = [
            row[0]
            for row in self.db.query(TodoModel.id)
            .filter(TodoModel.id.in_(list(todo_ids)), TodoModel.user_id == user_id)
            .all()
        ]
        if owned:
            self.db.query(TodoModel).filter(TodoModel.id.in_(owned)).delete(
                synchronize_session=False
            )
            self.db.commit()
        return owned

    def count_completed(self, user_id: str) -> Tuple[int, int]:
        """Return (total, completed) todo counts for a user."""
        total = (
            self.db.query(func.count(TodoModel.id)).filter(TodoModel.user_id == user_id).scalar()
        )
        completed = (
            self.db.query(func.count(TodoModel.id))
            .filter(TodoModel.user_id == user_id, TodoModel.completed.is_(True))
            .scalar()
        )
        return total or 0, completed or 0

    def _model_to_entity(self, model: TodoModel) -> Todo:
        return Todo(
            id=model.id,
            user_id=model.user_id,
            note_id=model.note_id,
            title=model.title,
            description=model.description,
            due_date=model.due_date,
            priority=model.priority,
            status=model.status,
            completed=bool(model.completed),
            completed_at=model.completed_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
