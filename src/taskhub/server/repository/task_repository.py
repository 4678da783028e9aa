"""
Repository implementation for task data access operations.
"""
import uuid
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from ...shared.api import PaginationParams
from ..routers.dto.requests.task_requests import TaskFilter
from ..utils.text_utils import tags_overlap
from .entities.task import Task
from .interfaces import ITaskRepository
from .models import TaskModel

_PRIORITY_ORDER = case(
    (TaskModel.priority == "high", 3),
    (TaskModel.priority == "medium", 2),
    (TaskModel.priority == "low", 1),
    else_=0,
)

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "assignee_id",
    "start_date",
    "due_date",
    "estimated_hours",
    "actual_hours",
    "tags",
    "dependencies",
)


class TaskRepository(ITaskRepository):
    """SQLAlchemy implementation of task repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(self, project_id: str, creator_id: str, task_data: dict) -> Task:
        now = now_epoch_ms()
        model = TaskModel(
            id=str(uuid.uuid4()),
            title=task_data["title"],
            description=task_data.get("description"),
            status=task_data.get("status") or "todo",
            priority=task_data.get("priority") or "medium",
            project_id=project_id,
            assignee_id=task_data.get("assignee_id"),
            creator_id=creator_id,
            start_date=task_data.get("start_date"),
            due_date=task_data.get("due_date"),
            estimated_hours=task_data.get("estimated_hours"),
            actual_hours=task_data.get("actual_hours"),
            tags=task_data.get("tags") or [],
            dependencies=task_data.get("dependencies") or [],
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def find_by_id(self, task_id: str) -> Optional[Task]:
        model = self.db.query(TaskModel).filter(TaskModel.id == task_id).first()
        return self._model_to_entity(model) if model else None

    def find_by_ids(self, task_ids: Sequence[str]) -> List[Task]:
        if not task_ids:
            return []
        models = self.db.query(TaskModel).filter(TaskModel.id.in_(list(task_ids))).all()
        return [self._model_to_entity(m) for m in models]

    def find_by_projects(self, project_ids: Sequence[str]) -> List[Task]:
        if not project_ids:
            return []
        models = self.db.query(TaskModel).filter(TaskModel.project_id.in_(list(project_ids))).all()
        return [self._model_to_entity(m) for m in models]

    def search(
        self,
        project_ids: Sequence[str],
        task_filter: TaskFilter,
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Task], int]:
        """
        Find tasks in the given projects matching the filter.

        Tag overlap is checked after the query, so the total and the page
        are computed over the tag-filtered rows.
        """
        if not project_ids:
            return [], 0

        query = self.db.query(TaskModel).filter(TaskModel.project_id.in_(list(project_ids)))

        if task_filter.project_id:
            query = query.filter(TaskModel.project_id == task_filter.project_id)
        if task_filter.assignee_id:
            query = query.filter(TaskModel.assignee_id == task_filter.assignee_id)
        if task_filter.status:
            query = query.filter(TaskModel.status == task_filter.status)
        if task_filter.priority:
            query = query.filter(TaskModel.priority == task_filter.priority)
        if task_filter.search:
            pattern = f"%{task_filter.search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(TaskModel.title).like(pattern),
                    func.lower(TaskModel.description).like(pattern),
                )
            )
        if task_filter.overdue:
            query = query.filter(
                TaskModel.due_date.isnot(None),
                TaskModel.due_date < now_epoch_ms(),
                TaskModel.status != "completed",
            )

        if task_filter.sort_by == "priority":
            sort_column = _PRIORITY_ORDER
        else:
            sort_column = getattr(TaskModel, task_filter.sort_by)
        if task_filter.sort_order == "asc":
            query = query.order_by(sort_column.asc(), TaskModel.id.asc())
        else:
            query = query.order_by(sort_column.desc(), TaskModel.id.asc())

        models = query.all()
        if task_filter.tags:
            models = [m for m in models if tags_overlap(m.tags, task_filter.tags)]

        total = len(models)
        if pagination:
            models = models[pagination.offset : pagination.offset + pagination.limit]
        return [self._model_to_entity(m) for m in models], total

    def update(self, task_id: str, update_data: dict) -> Optional[Task]:
        model = self.db.query(TaskModel).filter(TaskModel.id == task_id).first()
        if not model:
            return None

        for field in _UPDATABLE_FIELDS:
            if field in update_data:
                setattr(model, field, update_data[field])

        model.updated_at = now_epoch_ms()
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def update_status_many(self, task_ids: Sequence[str], status: str) -> int:
        if not task_ids:
            return 0
        result = (
            self.db.query(TaskModel)
            .filter(TaskModel.id.in_(list(task_ids)))
            .update({"status": status, "updated_at": now_epoch_ms()}, synchronize_session=False)
        )
        self.db.commit()
        return result

    def delete(self, task_id: str) -> bool:
        result = self.db.query(TaskModel).filter(TaskModel.id == task_id).delete()
        self.db.commit()
        return result > 0

    def _model_to_entity(self, model: TaskModel) -> Task:
        return Task(
            id=model.id,
            title=model.title,
            description=model.description,
            status=model.status,
            priority=model.priority,
            project_id=model.project_id,
            assignee_id=model.assignee_id,
            creator_id=model.creator_id,
            start_date=model.start_date,
            due_date=model.due_date,
            estimated_hours=model.estimated_hours,
            actual_hours=model.actual_hours,
            tags=model.tags or [],
            dependencies=model.dependencies or [],
            created_at=model.created_at,
            updated_at=model.updated_at,
            project_name=model.project.name if model.project else None,
            assignee_name=_user_name(model.assignee),
            creator_name=_user_name(model.creator),
        )


def _user_name(user) -> Optional[str]:
    if user is None:
        return None
    return user.display_name or user.email
