"""
Base response classes with automatic timestamp serialization.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_serializer

from .....shared import epoch_ms_to_iso8601

TIMESTAMP_FIELDS = (
    "created_at",
    "updated_at",
    "joined_at",
    "start_date",
    "end_date",
    "due_date",
    "completed_at",
    "todo_due_date",
)


class BaseTimestampResponse(BaseModel):
    """
    Base class for responses that include timestamp fields.

    Timestamp fields are stored as epoch milliseconds (int) internally and
    rendered as ISO 8601 strings in every serialized form, including when the
    response is nested inside another model.
    """

    model_config = ConfigDict(from_attributes=True)

    @model_serializer(mode="wrap")
    def _serialize_timestamps(self, handler) -> dict[str, Any]:
        data = handler(self)
        for field in TIMESTAMP_FIELDS:
            if data.get(field) is not None:
                data[field] = epoch_ms_to_iso8601(data[field])
        return data
