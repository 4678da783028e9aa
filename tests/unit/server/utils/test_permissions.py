"""
Unit tests for role-based project permissions.
"""

import pytest

from taskhub.server.utils.permissions import (
    MEMBERS_MANAGE,
    PROJECT_DELETE,
    PROJECT_READ,
    PROJECT_UPDATE,
    TASKS_WRITE,
    has_permission,
)


@pytest.mark.parametrize(
    "role,permission,expected",
    [
        ("owner", PROJECT_DELETE, True),
        ("admin", PROJECT_UPDATE, True),
        ("admin", MEMBERS_MANAGE, True),
        ("admin", PROJECT_DELETE, False),
        ("member", TASKS_WRITE, True),
        ("member", PROJECT_UPDATE, False),
        ("observer", PROJECT_READ, True),
        ("observer", TASKS_WRITE, False),
        (None, PROJECT_READ, False),
        ("stranger", PROJECT_READ, False),
    ],
)
def test_has_permission(role, permission, expected):
    assert has_permission(role, permission) is expected
