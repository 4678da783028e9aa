"""
General-purpose helpers shared by the server and background services.
"""

from .timestamp_utils import (
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    datetime_to_epoch_ms,
    epoch_ms_to_datetime,
    epoch_ms_to_iso8601,
    now_epoch_ms,
    to_epoch_ms,
)
from .types import CurrentUser, NoteId, ProjectId, TaskId, TodoId, UserId

__all__ = [
    "MS_PER_DAY",
    "MS_PER_HOUR",
    "MS_PER_MINUTE",
    "MS_PER_SECOND",
    "datetime_to_epoch_ms",
    "epoch_ms_to_datetime",
    "epoch_ms_to_iso8601",
    "now_epoch_ms",
    "to_epoch_ms",
    "CurrentUser",
    "NoteId",
    "ProjectId",
    "TaskId",
    "TodoId",
    "UserId",
]
