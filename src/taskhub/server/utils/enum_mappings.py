"""
Mappings from user-supplied status, priority and role labels to the
canonical English values stored in the database.

Clients may send either the English enum value or a Chinese label; both
resolve to the same stored value. Unknown input maps to None so callers
can decide between "not provided" and "invalid".
"""

from typing import Dict, Optional

PROJECT_STATUSES = ("planning", "active", "completed", "paused", "cancelled")
TASK_STATUSES = ("todo", "in_progress", "completed", "cancelled")
TODO_STATUSES = ("not_started", "in_progress", "completed")
PRIORITIES = ("low", "medium", "high")
MEMBER_ROLES = ("admin", "member", "observer")

PRIORITY_RANK: Dict[str, int] = {"high": 3, "medium": 2, "low": 1}
ROLE_RANK: Dict[str, int] = {"admin": 1, "member": 2, "observer": 3}

_PROJECT_STATUS_ALIASES: Dict[str, str] = {
    "canceled": "cancelled",
    "archived": "completed",
    "规划中": "planning",
    "进行中": "active",
    "暂停": "paused",
    "已暂停": "paused",
    "完成": "completed",
    "已完成": "completed",
    "取消": "cancelled",
    "已取消": "cancelled",
    "归档": "completed",
    "已归档": "completed",
}

_TASK_STATUS_ALIASES: Dict[str, str] = {
    "pending": "todo",
    "in-progress": "in_progress",
    "canceled": "cancelled",
    "待办": "todo",
    "进行中": "in_progress",
    "已完成": "completed",
    "已取消": "cancelled",
}

_TODO_STATUS_ALIASES: Dict[str, str] = {
    "in-progress": "in_progress",
    "未开始": "not_started",
    "进行中": "in_progress",
    "已完成": "completed",
}

_PRIORITY_ALIASES: Dict[str, str] = {
    "低": "low",
    "中": "medium",
    "高": "high",
    "低优先级": "low",
    "中优先级": "medium",
    "高优先级": "high",
}


def _map(value: Optional[str], canonical: tuple, aliases: Dict[str, str]) -> Optional[str]:
    if value is None:
        return None
    key = str(value).strip()
    lowered = key.lower()
    if lowered in canonical:
        return lowered
    return aliases.get(lowered) or aliases.get(key)


def map_project_status(value: Optional[str]) -> Optional[str]:
    return _map(value, PROJECT_STATUSES, _PROJECT_STATUS_ALIASES)


def map_task_status(value: Optional[str]) -> Optional[str]:
    return _map(value, TASK_STATUSES, _TASK_STATUS_ALIASES)


def map_todo_status(value: Optional[str]) -> Optional[str]:
    return _map(value, TODO_STATUSES, _TODO_STATUS_ALIASES)


def map_priority(value: Optional[str]) -> Optional[str]:
    return _map(value, PRIORITIES, _PRIORITY_ALIASES)


def is_valid_role(value: Optional[str]) -> bool:
    return value in MEMBER_ROLES


def require_mapped(value: Optional[str], mapper, field: str) -> Optional[str]:
    """
    Map an optional input value, raising if it was given but is not recognised.

    Returns None when the value is None or an empty string.

    Raises:
        ValueError: If a non-empty value has no mapping
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    mapped = mapper(value)
    if mapped is None:
        raise ValueError(f"Invalid {field}: {value}")
    return mapped
