"""
Business service for task operations.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...shared.api import PaginationParams
from ...shared.exceptions import EntityNotFoundError
from ...shared.utils import now_epoch_ms, to_epoch_ms
from ..repository.entities.task import Task
from ..repository.interfaces import ITaskRepository
from ..routers.dto.requests.task_requests import TaskFilter
from ..utils.enum_mappings import map_priority, map_task_status, require_mapped
from ..utils.permissions import TASKS_READ, TASKS_WRITE, has_permission
from ..utils.text_utils import is_uuid, parse_tags
from .project_service import ProjectService


class TaskService:
    """Service layer for task business logic."""

    def __init__(self, task_repository: ITaskRepository, project_service: ProjectService):
        self.task_repository = task_repository
        self.project_service = project_service
        self.logger = logging.getLogger(__name__)

    def _require_task(self, task_id: str, user_id: str, permission: str) -> Task:
        task = self.task_repository.find_by_id(task_id)
        if not task:
            raise EntityNotFoundError("Task", task_id)
        try:
            self.project_service.require_permission(task.project_id, user_id, permission)
        except EntityNotFoundError:
            raise EntityNotFoundError("Task", task_id) from None
        return task

    def _normalize_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        normalized = dict(data)
        if "status" in normalized:
            normalized["status"] = require_mapped(normalized["status"], map_task_status, "status")
            if normalized["status"] is None:
                normalized.pop("status")
        if "priority" in normalized:
            normalized["priority"] = require_mapped(normalized["priority"], map_priority, "priority")
            if normalized["priority"] is None:
                normalized.pop("priority")
        for field in ("start_date", "due_date"):
            if field in normalized:
                normalized[field] = to_epoch_ms(normalized[field])
        if "tags" in normalized:
            normalized["tags"] = parse_tags(normalized["tags"])
        if "title" in normalized:
            title = (normalized["title"] or "").strip()
            if not title:
                raise ValueError("Task title cannot be empty")
            normalized["title"] = title
        if "assignee_id" in normalized and not normalized["assignee_id"]:
            normalized["assignee_id"] = None
        if "dependencies" in normalized:
            normalized["dependencies"] = list(dict.fromkeys(normalized["dependencies"] or []))
        return normalized

    def _validate_assignee(self, project_id: str, assignee_id: Optional[str]) -> None:
        if not assignee_id:
            return
        project = self.project_service.project_repository.find_by_id(project_id)
        if project and project.owner_id == assignee_id:
            return
        if self.project_service.member_repository.find_role(project_id, assignee_id) is None:
            raise ValueError("Assignee must be the project owner or a project member")

    def _validate_dependencies(
        self, project_id: str, dependencies: Sequence[str], task_id: Optional[str] = None
    ) -> None:
        if not dependencies:
            return
        if task_id and task_id in dependencies:
            raise ValueError("A task cannot depend on itself")
        found = self.task_repository.find_by_ids(dependencies)
        if len(found) != len(dependencies) or any(t.project_id != project_id for t in found):
            raise ValueError("Dependencies must reference tasks in the same project")

    # Queries

    def list_project_tasks(self, project_id: str, user_id: str) -> List[Task]:
        if not is_uuid(project_id):
            raise ValueError("Invalid project_id format. Expect UUID.")
        self.project_service.require_permission(project_id, user_id, TASKS_READ)
        tasks, _ = self.task_repository.search([project_id], TaskFilter(project_id=project_id))
        return tasks

    def search_tasks(
        self,
        user_id: str,
        task_filter: TaskFilter,
        pagination: PaginationParams,
    ) -> Tuple[List[Task], int]:
        """Search tasks across every project the user can access."""
        task_filter = task_filter.model_copy(
            update={
                "status": require_mapped(task_filter.status, map_task_status, "status"),
                "priority": require_mapped(task_filter.priority, map_priority, "priority"),
            }
        )
        project_ids = self.project_service.accessible_project_ids(user_id)
        if task_filter.project_id and task_filter.project_id not in project_ids:
            return [], 0
        return self.task_repository.search(project_ids, task_filter, pagination)

    def get_task(self, task_id: str, user_id: str) -> Task:
        return self._require_task(task_id, user_id, TASKS_READ)

    def _scoped_tasks(self, user_id: str, project_id: Optional[str]) -> List[Task]:
        if project_id:
            self.project_service.require_permission(project_id, user_id, TASKS_READ)
            return self.task_repository.find_by_projects([project_id])
        return self.task_repository.find_by_projects(self.project_service.accessible_project_ids(user_id))

    def get_stats(self, user_id: str, project_id: Optional[str] = None) -> Dict[str, int]:
        tasks = self._scoped_tasks(user_id, project_id)
        now = now_epoch_ms()
        return {
            "total_tasks": len(tasks),
            "todo_tasks": sum(1 for t in tasks if t.status == "todo"),
            "in_progress_tasks": sum(1 for t in tasks if t.status == "in_progress"),
            "completed_tasks": sum(1 for t in tasks if t.status == "completed"),
            "high_priority_tasks": sum(1 for t in tasks if t.priority == "high"),
            "overdue_tasks": sum(1 for t in tasks if t.is_overdue(now)),
        }

    def get_tags(self, user_id: str, project_id: Optional[str] = None) -> List[str]:
        tags = set()
        for task in self._scoped_tasks(user_id, project_id):
            tags.update(task.tags)
        return sorted(tags)

    def get_dependencies(self, task_id: str, user_id: str) -> Dict[str, Any]:
        task = self._require_task(task_id, user_id, TASKS_READ)
        dependencies = self.task_repository.find_by_ids(task.dependencies)
        return {
            "dependencies": dependencies,
            "all_completed": all(d.is_completed() for d in dependencies),
        }

    # Commands

    def create_task(self, project_id: str, user_id: str, task_data: Dict[str, Any]) -> Task:
        if not is_uuid(project_id):
            raise ValueError("Invalid project_id format. Expect UUID.")
        self.project_service.require_permission(project_id, user_id, TASKS_WRITE)

        data = self._normalize_fields(task_data)
        self._validate_assignee(project_id, data.get("assignee_id"))
        self._validate_dependencies(project_id, data.get("dependencies") or [])

        task = self.task_repository.create(project_id, user_id, data)
        self.project_service.on_task_status_changed(task)
        self.logger.info(f"Created task {task.id} in project {project_id}")
        return self.task_repository.find_by_id(task.id)

    def update_task(self, task_id: str, user_id: str, update_data: Dict[str, Any]) -> Task:
        if not update_data:
            raise ValueError("No fields to update")
        task = self._require_task(task_id, user_id, TASKS_WRITE)

        data = self._normalize_fields(update_data)
        if not data:
            raise ValueError("No fields to update")
        if "assignee_id" in data:
            self._validate_assignee(task.project_id, data["assignee_id"])
        if "dependencies" in data:
            self._validate_dependencies(task.project_id, data["dependencies"], task_id=task_id)

        updated = self.task_repository.update(task_id, data)
        if not updated:
            raise EntityNotFoundError("Task", task_id)
        self.project_service.on_task_status_changed(updated)
        return updated

    def delete_task(self, task_id: str, user_id: str) -> None:
        task = self._require_task(task_id, user_id, TASKS_WRITE)
        self.task_repository.delete(task_id)
        self.project_service.on_task_status_changed(task)
        self.logger.info(f"Deleted task {task_id}")

    def batch_update_status(self, user_id: str, task_ids: List[str], status: str) -> int:
        """Update the status of every listed task the user may write; others are skipped."""
        mapped = require_mapped(status, map_task_status, "status")
        if not mapped:
            raise ValueError("Status is required")

        roles: Dict[str, Optional[str]] = {}
        writable: List[Task] = []
        for task in self.task_repository.find_by_ids(task_ids):
            if task.project_id not in roles:
                project = self.project_service.project_repository.find_by_id(task.project_id)
                roles[task.project_id] = (
                    self.project_service.get_user_role(project, user_id) if project else None
                )
            if has_permission(roles[task.project_id], TASKS_WRITE):
                writable.append(task)

        if not writable and task_ids:
            self.logger.info(f"User {user_id} could not update any of {len(task_ids)} tasks")

        updated = self.task_repository.update_status_many([t.id for t in writable], mapped)
        for project_id in {t.project_id for t in writable}:
            self.project_service.update_project_progress(project_id)
        return updated
