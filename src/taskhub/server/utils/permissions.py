"""
Role-based permission checks for project collaboration.
"""

from typing import Dict, FrozenSet, Optional

OWNER_ROLE = "owner"

PROJECT_READ = "project:read"
PROJECT_UPDATE = "project:update"
PROJECT_DELETE = "project:delete"
MEMBERS_MANAGE = "members:manage"
TASKS_READ = "tasks:read"
TASKS_WRITE = "tasks:write"

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "admin": frozenset(
        {PROJECT_READ, PROJECT_UPDATE, MEMBERS_MANAGE, TASKS_READ, TASKS_WRITE}
    ),
    "member": frozenset({PROJECT_READ, TASKS_READ, TASKS_WRITE}),
    "observer": frozenset({PROJECT_READ, TASKS_READ}),
}


def has_permission(role: Optional[str], permission: str) -> bool:
    """Return True if the role grants the permission. Owners hold every permission."""
    if role == OWNER_ROLE:
        return True
    if role is None:
        return False
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
