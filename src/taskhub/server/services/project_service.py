"""
Business service for project-related operations.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ...shared.api import PaginationParams
from ...shared.exceptions import EntityNotFoundError, PermissionDeniedError
from ...shared.utils import to_epoch_ms
from ..repository.entities.project import Project
from ..repository.entities.task import Task
from ..repository.interfaces import IProjectMemberRepository, IProjectRepository, ITaskRepository
from ..routers.dto.requests.project_requests import ProjectFilter
from ..utils.enum_mappings import map_priority, map_project_status, require_mapped
from ..utils.permissions import OWNER_ROLE, PROJECT_DELETE, PROJECT_READ, PROJECT_UPDATE, has_permission
from ..utils.project_tree import build_project_tree, make_project_filter, prune_project_tree
from ..utils.text_utils import parse_tags

_MAX_ANCESTRY_DEPTH = 1000


def calculate_progress(total: int, completed: int) -> float:
    """Completed share of tasks as a percentage rounded to two places."""
    if total <= 0:
        return 0
    return round(completed * 100 / total, 2)


class ProjectService:
    """Service layer for project business logic."""

    def __init__(
        self,
        project_repository: IProjectRepository,
        member_repository: IProjectMemberRepository,
        task_repository: ITaskRepository,
    ):
        self.project_repository = project_repository
        self.member_repository = member_repository
        self.task_repository = task_repository
        self.logger = logging.getLogger(__name__)

    # Access control

    def get_user_role(self, project: Project, user_id: str) -> Optional[str]:
        if project.is_owned_by(user_id):
            return OWNER_ROLE
        return self.member_repository.find_role(project.id, user_id)

    def require_permission(self, project_id: str, user_id: str, permission: str) -> Tuple[Project, str]:
        """
        Load a project and check the user's permission on it.

        Raises:
            EntityNotFoundError: If the project does not exist or the user has no role in it
            PermissionDeniedError: If the user's role lacks the permission
        """
        project = self.project_repository.find_by_id(project_id)
        if not project:
            raise EntityNotFoundError("Project", project_id)
        role = self.get_user_role(project, user_id)
        if role is None:
            raise EntityNotFoundError("Project", project_id)
        if not has_permission(role, permission):
            self.logger.info(
                f"User {user_id} with role {role} denied {permission} on project {project_id}"
            )
            raise PermissionDeniedError(f"Permission denied: {permission}")
        return project, role

    def accessible_project_ids(self, user_id: str) -> List[str]:
        return self.project_repository.find_accessible_ids(user_id)

    # Queries

    def _with_stats(self, project: Project, role: Optional[str] = None) -> Project:
        total, completed = self.project_repository.count_tasks(project.id)
        return project.model_copy(
            update={
                "member_count": self.project_repository.count_members(project.id),
                "task_count": total,
                "tasks_completed": completed,
                "progress": calculate_progress(total, completed),
                "user_role": role,
            }
        )

    def list_projects(
        self,
        user_id: str,
        pagination: PaginationParams,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        parent_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Project], int]:
        """
        List projects the user owns or is a member of.

        An empty-string ``parent_id`` selects root projects only.
        """
        project_filter = ProjectFilter(
            user_id=user_id,
            status=require_mapped(status, map_project_status, "status"),
            priority=require_mapped(priority, map_priority, "priority"),
            parent_id=parent_id or None,
            root_only=parent_id is not None and parent_id.strip() == "",
            search=search.strip() if search and search.strip() else None,
        )
        projects, total = self.project_repository.get_filtered_projects(project_filter, pagination)
        return [self._with_stats(p) for p in projects], total

    def get_project_tree(
        self,
        user_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        projects, _ = self.project_repository.get_filtered_projects(ProjectFilter(user_id=user_id))
        roots = build_project_tree([self._with_stats(p).model_dump() for p in projects])
        predicate = make_project_filter(
            status=require_mapped(status, map_project_status, "status"),
            priority=require_mapped(priority, map_priority, "priority"),
            search=search.strip() if search and search.strip() else None,
        )
        return prune_project_tree(roots, predicate) if predicate else roots

    def get_project(self, project_id: str, user_id: str) -> Project:
        project, role = self.require_permission(project_id, user_id, PROJECT_READ)
        return self._with_stats(project, role)

    def get_sub_projects(self, project_id: str, user_id: str) -> List[Project]:
        self.require_permission(project_id, user_id, PROJECT_READ)
        return [self._with_stats(p) for p in self.project_repository.find_children(project_id)]

    def get_project_path(self, project_id: str, user_id: str) -> List[Project]:
        """Ancestors from the root down to the project itself."""
        project, _ = self.require_permission(project_id, user_id, PROJECT_READ)
        path = [project]
        seen = {project.id}
        current = project
        while current.parent_id and len(path) < _MAX_ANCESTRY_DEPTH:
            parent = self.project_repository.find_by_id(current.parent_id)
            if not parent or parent.id in seen:
                break
            path.append(parent)
            seen.add(parent.id)
            current = parent
        path.reverse()
        return path

    def get_statistics(self, user_id: str) -> Dict[str, int]:
        projects, total = self.project_repository.get_filtered_projects(ProjectFilter(user_id=user_id))
        return {
            "total_projects": total,
            "active_projects": sum(1 for p in projects if p.status == "active"),
            "completed_projects": sum(1 for p in projects if p.status == "completed"),
            "high_priority_projects": sum(1 for p in projects if p.priority == "high"),
        }

    def get_member_projects(self, user_id: str) -> List[Project]:
        """Projects the user is a member of, annotated with the user's role."""
        memberships = self.member_repository.find_by_user(user_id)
        roles = {m.project_id: m.role for m in memberships}
        projects = self.project_repository.find_by_ids(list(roles))
        projects.sort(key=lambda p: p.updated_at, reverse=True)
        return [self._with_stats(p, roles.get(p.id)) for p in projects]

    # Commands

    def _normalize_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        normalized = dict(data)
        if "status" in normalized:
            normalized["status"] = require_mapped(normalized["status"], map_project_status, "status")
            if normalized["status"] is None:
                normalized.pop("status")
        if "priority" in normalized:
            normalized["priority"] = require_mapped(normalized["priority"], map_priority, "priority")
            if normalized["priority"] is None:
                normalized.pop("priority")
        for field in ("start_date", "end_date"):
            if field in normalized:
                normalized[field] = to_epoch_ms(normalized[field])
        if "tags" in normalized:
            normalized["tags"] = parse_tags(normalized["tags"])
        if "name" in normalized:
            name = (normalized["name"] or "").strip()
            if not name:
                raise ValueError("Project name cannot be empty")
            normalized["name"] = name
        if "parent_id" in normalized and not normalized["parent_id"]:
            normalized["parent_id"] = None
        return normalized

    def create_project(self, user_id: str, project_data: Dict[str, Any]) -> Project:
        """
        Create a project owned by the user and add the owner as an admin member.

        Raises:
            ValueError: If the name, status, priority or dates are invalid
            EntityNotFoundError: If the parent project is missing or inaccessible
        """
        data = self._normalize_fields(project_data)
        self.logger.info(f"Creating new project '{data.get('name')}' for user {user_id}")

        if data.get("parent_id"):
            self.require_permission(data["parent_id"], user_id, PROJECT_READ)

        project = self.project_repository.create(user_id, data)
        self.member_repository.add(project.id, user_id, "admin")
        self.logger.info(f"Successfully created project {project.id} for user {user_id}")
        return self._with_stats(project, OWNER_ROLE)

    def _is_descendant(self, candidate_id: str, ancestor_id: str) -> bool:
        """True if ``candidate_id`` lies below ``ancestor_id`` in the hierarchy."""
        seen = set()
        current = self.project_repository.find_by_id(candidate_id)
        while current and current.parent_id and current.id not in seen:
            if current.parent_id == ancestor_id:
                return True
            seen.add(current.id)
            current = self.project_repository.find_by_id(current.parent_id)
        return False

    def update_project(self, project_id: str, user_id: str, update_data: Dict[str, Any]) -> Project:
        """
        Apply a partial update.

        Raises:
            ValueError: If nothing is updated, or the new parent is the project
                itself or one of its descendants
        """
        if not update_data:
            raise ValueError("No fields to update")

        _, role = self.require_permission(project_id, user_id, PROJECT_UPDATE)
        data = self._normalize_fields(update_data)
        if not data:
            raise ValueError("No fields to update")

        parent_id = data.get("parent_id")
        if parent_id:
            if parent_id == project_id:
                raise ValueError("A project cannot be its own parent")
            self.require_permission(parent_id, user_id, PROJECT_READ)
            if self._is_descendant(parent_id, project_id):
                raise ValueError("Cannot move a project under one of its descendants")

        project = self.project_repository.update(project_id, data)
        if not project:
            raise EntityNotFoundError("Project", project_id)
        self.logger.info(f"Updated project {project_id}")
        return self._with_stats(project, role)

    def delete_project(self, project_id: str, user_id: str) -> None:
        self.require_permission(project_id, user_id, PROJECT_DELETE)
        self.project_repository.delete(project_id)
        self.logger.info(f"Deleted project {project_id} by owner {user_id}")

    # Progress

    def update_project_progress(self, project_id: str) -> float:
        total, completed = self.project_repository.count_tasks(project_id)
        progress = calculate_progress(total, completed)
        self.project_repository.update_progress(project_id, progress)
        return progress

    def update_all_projects_progress(self) -> int:
        project_ids = self.project_repository.find_all_ids()
        for project_id in project_ids:
            self.update_project_progress(project_id)
        self.logger.info(f"Recomputed progress for {len(project_ids)} projects")
        return len(project_ids)

    def on_task_status_changed(self, task: Task) -> None:
        """Recompute the stored progress of the task's project."""
        progress = self.update_project_progress(task.project_id)
        self.logger.debug(f"Project {task.project_id} progress is now {progress}")
