"""
Repository implementation for project membership.
"""

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from ..utils.enum_mappings import ROLE_RANK
from .entities.project_member import ProjectMember
from .interfaces import IProjectMemberRepository
from .models import ProjectMemberModel, UserModel


class ProjectMemberRepository(IProjectMemberRepository):
    """SQLAlchemy implementation of project member repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def _joined_query(self):
        return self.db.query(ProjectMemberModel, UserModel).join(
            UserModel, UserModel.id == ProjectMemberModel.user_id
        )

    def find_by_project(self, project_id: str) -> List[ProjectMember]:
        """Members with user details, ordered by role rank then join time."""
        rows = self._joined_query().filter(ProjectMemberModel.project_id == project_id).all()
        members = [self._row_to_entity(m, u) for m, u in rows]
        members.sort(key=lambda m: (ROLE_RANK.get(m.role, 99), m.joined_at))
        return members

    def find_recent(self, project_id: str, limit: int = 5) -> List[ProjectMember]:
        rows = (
            self._joined_query()
            .filter(ProjectMemberModel.project_id == project_id)
            .order_by(ProjectMemberModel.joined_at.desc())
            .limit(limit)
            .all()
        )
        return [self._row_to_entity(m, u) for m, u in rows]

    def find_by_id(self, member_id: str) -> Optional[ProjectMember]:
        row = self._joined_query().filter(ProjectMemberModel.id == member_id).first()
        return self._row_to_entity(*row) if row else None

    def find_membership(self, project_id: str, user_id: str) -> Optional[ProjectMember]:
        row = (
            self._joined_query()
            .filter(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == user_id,
            )
            .first()
        )
        return self._row_to_entity(*row) if row else None

    def find_by_user(self, user_id: str) -> List[ProjectMember]:
        rows = self._joined_query().filter(ProjectMemberModel.user_id == user_id).all()
        return [self._row_to_entity(m, u) for m, u in rows]

    def find_role(self, project_id: str, user_id: str) -> Optional[str]:
        row = (
            self.db.query(ProjectMemberModel.role)
            .filter(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == user_id,
            )
            .first()
        )
        return row[0] if row else None

    def find_user_ids(self, project_id: str) -> List[str]:
        rows = (
            self.db.query(ProjectMemberModel.user_id)
            .filter(ProjectMemberModel.project_id == project_id)
            .all()
        )
        return [row[0] for row in rows]

    def add(self, project_id: str, user_id: str, role: str = "member") -> ProjectMember:
        model = ProjectMemberModel(
            id=str(uuid.uuid4()),
            project_id=project_id,
            user_id=user_id,
            role=role,
            joined_at=now_epoch_ms(),
        )
        self.db.add(model)
        self.db.commit()
        return self.find_by_id(model.id)

    def update_role(self, member_id: str, role: str) -> Optional[ProjectMember]:
        result = (
            self.db.query(ProjectMemberModel)
            .filter(ProjectMemberModel.id == member_id)
            .update({"role": role}, synchronize_session=False)
        )
        self.db.commit()
        return self.find_by_id(member_id) if result else None

    def delete(self, member_id: str) -> bool:
        result = (
            self.db.query(ProjectMemberModel)
            .filter(ProjectMemberModel.id == member_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return result > 0

    def _row_to_entity(self, model: ProjectMemberModel, user: Optional[UserModel]) -> ProjectMember:
        return ProjectMember(
            id=model.id,
            project_id=model.project_id,
            user_id=model.user_id,
            role=model.role,
            joined_at=model.joined_at,
            user_email=user.email if user else None,
            user_display_name=user.display_name if user else None,
        )
