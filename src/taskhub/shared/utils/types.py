"""
Common type aliases shared across the backend.
"""

from typing import Any, Dict

UserId = str
ProjectId = str
TaskId = str
TodoId = str
NoteId = str

# Authenticated user as resolved by the auth dependency
CurrentUser = Dict[str, Any]
