"""
Business service for project membership.
"""

import logging
from typing import Dict, List, Optional

from ...shared.exceptions import (
    BusinessRuleViolationError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from ..repository.entities.project_member import ProjectMember
from ..repository.entities.user import User
from ..repository.interfaces import IProjectMemberRepository, IUserRepository
from ..utils.enum_mappings import MEMBER_ROLES, is_valid_role
from ..utils.permissions import MEMBERS_MANAGE, PROJECT_READ
from .project_service import ProjectService

log = logging.getLogger(__name__)

DEFAULT_ROLE = "member"
USER_SEARCH_LIMIT = 10
RECENT_MEMBERS_LIMIT = 5


class ProjectMemberService:
    """Manages who collaborates on a project and with which role."""

    def __init__(
        self,
        project_service: ProjectService,
        member_repository: IProjectMemberRepository,
        user_repository: IUserRepository,
    ):
        self.project_service = project_service
        self.member_repository = member_repository
        self.user_repository = user_repository

    def _resolve_role(self, role: Optional[str]) -> str:
        role = (role or DEFAULT_ROLE).strip().lower()
        if not is_valid_role(role):
            raise ValueError(f"Invalid role. Must be one of: {', '.join(MEMBER_ROLES)}")
        return role

    def _get_project_member(self, project_id: str, member_id: str) -> ProjectMember:
        member = self.member_repository.find_by_id(member_id)
        if not member or member.project_id != project_id:
            raise EntityNotFoundError("Member", member_id)
        return member

    def list_members(self, project_id: str, user_id: str) -> List[ProjectMember]:
        self.project_service.require_permission(project_id, user_id, PROJECT_READ)
        return self.member_repository.find_by_project(project_id)

    def add_member(
        self, project_id: str, user_id: str, target_user_id: str, role: Optional[str] = None
    ) -> ProjectMember:
        """
        Add a user to a project.

        Raises:
            EntityNotFoundError: If the user does not exist
            DuplicateEntityError: If the user is already a member
        """
        self.project_service.require_permission(project_id, user_id, MEMBERS_MANAGE)
        role = self._resolve_role(role)

        if not self.user_repository.find_by_id(target_user_id):
            raise EntityNotFoundError("User", target_user_id)
        if self.member_repository.find_membership(project_id, target_user_id):
            raise DuplicateEntityError("User is already a member of this project")

        member = self.member_repository.add(project_id, target_user_id, role)
        log.info("Added user %s to project %s as %s", target_user_id, project_id, role)
        return member

    def add_members_batch(
        self, project_id: str, user_id: str, target_user_ids: List[str], role: Optional[str] = None
    ) -> List[ProjectMember]:
        """Add several users, skipping unknown users and existing members."""
        self.project_service.require_permission(project_id, user_id, MEMBERS_MANAGE)
        role = self._resolve_role(role)

        existing = set(self.member_repository.find_user_ids(project_id))
        known = {u.id for u in self.user_repository.find_by_ids(target_user_ids)}
        added = []
        for target_id in dict.fromkeys(target_user_ids):
            if target_id in existing or target_id not in known:
                continue
            added.append(self.member_repository.add(project_id, target_id, role))
            existing.add(target_id)
        log.info("Batch added %d members to project %s", len(added), project_id)
        return added

    def update_member_role(
        self, project_id: str, user_id: str, member_id: str, role: Optional[str]
    ) -> ProjectMember:
        project, _ = self.project_service.require_permission(project_id, user_id, MEMBERS_MANAGE)
        if not role:
            raise ValueError("Role is required")
        role = self._resolve_role(role)

        member = self._get_project_member(project_id, member_id)
        if member.user_id == project.owner_id and role != "admin":
            raise BusinessRuleViolationError("The project owner must remain an admin")

        return self.member_repository.update_role(member_id, role)

    def remove_member(self, project_id: str, user_id: str, member_id: str) -> None:
        """
        Remove a member. Members may always remove themselves; removing others
        requires ``members:manage``. The owner cannot be removed.
        """
        project, _ = self.project_service.require_permission(project_id, user_id, PROJECT_READ)
        member = self._get_project_member(project_id, member_id)

        if member.user_id == project.owner_id:
            raise BusinessRuleViolationError("The project owner cannot be removed")
        if member.user_id != user_id:
            self.project_service.require_permission(project_id, user_id, MEMBERS_MANAGE)

        self.member_repository.delete(member_id)
        log.info("Removed member %s from project %s", member_id, project_id)

    def get_member_stats(self, project_id: str, user_id: str) -> Dict[str, int]:
        members = self.list_members(project_id, user_id)
        return {
            "total_members": len(members),
            "admin_count": sum(1 for m in members if m.role == "admin"),
            "member_count": sum(1 for m in members if m.role == "member"),
            "observer_count": sum(1 for m in members if m.role == "observer"),
        }

    def search_users(self, project_id: str, user_id: str, query: Optional[str]) -> List[User]:
        """Users matching the query who are not yet part of the project."""
        project, _ = self.project_service.require_permission(project_id, user_id, PROJECT_READ)
        if not query or not query.strip():
            raise ValueError("Search query is required")
        exclude = set(self.member_repository.find_user_ids(project_id))
        exclude.add(project.owner_id)
        return self.user_repository.search(query, exclude_ids=list(exclude), limit=USER_SEARCH_LIMIT)

    def recent_members(self, project_id: str, user_id: str) -> List[ProjectMember]:
        self.project_service.require_permission(project_id, user_id, PROJECT_READ)
        return self.member_repository.find_recent(project_id, RECENT_MEMBERS_LIMIT)
