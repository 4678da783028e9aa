"""
Repository implementation for project data access operations.
"""
import uuid
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from ...shared.api import PaginationParams
from ..routers.dto.requests.project_requests import ProjectFilter
from .entities.project import Project
from .interfaces import IProjectRepository
from .models import ProjectMemberModel, ProjectModel, TaskModel


class ProjectRepository(IProjectRepository):
    """SQLAlchemy implementation of project repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(self, owner_id: str, project_data: dict) -> Project:
        """Create a project owned by the given user."""
        now = now_epoch_ms()
        model = ProjectModel(
            id=str(uuid.uuid4()),
            name=project_data["name"],
            description=project_data.get("description"),
            status=project_data.get("status") or "planning",
            priority=project_data.get("priority") or "medium",
            parent_id=project_data.get("parent_id"),
            owner_id=owner_id,
            start_date=project_data.get("start_date"),
            end_date=project_data.get("end_date"),
            progress=project_data.get("progress") or 0,
            tags=project_data.get("tags") or [],
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def find_by_id(self, project_id: str) -> Optional[Project]:
        model = self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()
        return self._model_to_entity(model) if model else None

    def find_by_ids(self, project_ids: Sequence[str]) -> List[Project]:
        if not project_ids:
            return []
        models = self.db.query(ProjectModel).filter(ProjectModel.id.in_(list(project_ids))).all()
        return [self._model_to_entity(m) for m in models]

    def find_accessible_ids(self, user_id: str) -> List[str]:
        """Ids of projects the user owns or is a member of."""
        member_ids = self.db.query(ProjectMemberModel.project_id).filter(
            ProjectMemberModel.user_id == user_id
        )
        rows = (
            self.db.query(ProjectModel.id)
            .filter(or_(ProjectModel.owner_id == user_id, ProjectModel.id.in_(member_ids)))
            .all()
        )
        return [row[0] for row in rows]

    def get_filtered_projects(
        self, project_filter: ProjectFilter, pagination: Optional[PaginationParams] = None
    ) -> Tuple[List[Project], int]:
        """Get accessible projects matching the filter, newest update first."""
        member_ids = self.db.query(ProjectMemberModel.project_id).filter(
            ProjectMemberModel.user_id == project_filter.user_id
        )
        query = self.db.query(ProjectModel).filter(
            or_(
                ProjectModel.owner_id == project_filter.user_id,
                ProjectModel.id.in_(member_ids),
            )
        )

        if project_filter.status:
            query = query.filter(ProjectModel.status == project_filter.status)
        if project_filter.priority:
            query = query.filter(ProjectModel.priority == project_filter.priority)
        if project_filter.root_only:
            query = query.filter(ProjectModel.parent_id.is_(None))
        elif project_filter.parent_id:
            query = query.filter(ProjectModel.parent_id == project_filter.parent_id)
        if project_filter.search:
            pattern = f"%{project_filter.search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(ProjectModel.name).like(pattern),
                    func.lower(ProjectModel.description).like(pattern),
                )
            )

        total = query.count()
        query = query.order_by(ProjectModel.updated_at.desc())
        if pagination:
            query = query.offset(pagination.offset).limit(pagination.limit)
        return [self._model_to_entity(m) for m in query.all()], total

    def find_children(self, project_id: str) -> List[Project]:
        models = (
            self.db.query(ProjectModel)
            .filter(ProjectModel.parent_id == project_id)
            .order_by(ProjectModel.created_at.desc())
            .all()
        )
        return [self._model_to_entity(m) for m in models]

    def find_all_ids(self) -> List[str]:
        return [row[0] for row in self.db.query(ProjectModel.id).all()]

    def count_tasks(self, project_id: str) -> Tuple[int, int]:
        """Return (total, completed) task counts for a project."""
        total = self.db.query(func.count(TaskModel.id)).filter(TaskModel.project_id == project_id).scalar()
        completed = (
            self.db.query(func.count(TaskModel.id))
            .filter(TaskModel.project_id == project_id, TaskModel.status == "completed")
            .scalar()
        )
        return total or 0, completed or 0

    def count_members(self, project_id: str) -> int:
        return (
            self.db.query(func.count(ProjectMemberModel.id))
            .filter(ProjectMemberModel.project_id == project_id)
            .scalar()
            or 0
        )

    def update(self, project_id: str, update_data: dict) -> Optional[Project]:
        """Update a project with the given data."""
        model = self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()
        if not model:
            return None

        for field, value in update_data.items():
            if hasattr(model, field):
                setattr(model, field, value)

        model.updated_at = now_epoch_ms()
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def update_progress(self, project_id: str, progress: float) -> bool:
        result = (
            self.db.query(ProjectModel)
            .filter(ProjectModel.id == project_id)
            .update({"progress": progress}, synchronize_session=False)
        )
        self.db.commit()
        return result > 0

    def delete(self, project_id: str) -> bool:
        """Delete a project. Children are detached to become roots."""
        self.db.query(ProjectModel).filter(ProjectModel.parent_id == project_id).update(
            {"parent_id": None}, synchronize_session=False
        )
        self.db.query(TaskModel).filter(TaskModel.project_id == project_id).delete(
            synchronize_session=False
        )
        self.db.query(ProjectMemberModel).filter(ProjectMemberModel.project_id == project_id).delete(
            synchronize_session=False
        )
        result = self.db.query(ProjectModel).filter(ProjectModel.id == project_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        return result > 0

    def _model_to_entity(self, model: ProjectModel) -> Project:
        """Convert SQLAlchemy model to domain entity."""
        return Project(
            id=model.id,
            name=model.name,
            description=model.description,
            status=model.status,
            priority=model.priority,
            parent_id=model.parent_id,
            owner_id=model.owner_id,
            start_date=model.start_date,
            end_date=model.end_date,
            progress=model.progress or 0,
            tags=model.tags or [],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
