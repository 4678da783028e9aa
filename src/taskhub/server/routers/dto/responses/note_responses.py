"""
Note response DTOs.
"""

from typing import List, Optional

from pydantic import Field

from .base_responses import BaseTimestampResponse


class NoteResponse(BaseTimestampResponse):
    """Response DTO for a note. The embedding vector itself is not returned."""

    id: str
    user_id: str
    notebook_id: Optional[str] = None
    title: str
    content: Optional[str] = None
    content_text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool = False
    is_archived: bool = False
    has_embedding: bool = False
    similarity: Optional[float] = None
    created_at: int
    updated_at: int

    @classmethod
    def from_entity(cls, note) -> "NoteResponse":
        response = cls.model_validate(note)
        response.has_embedding = bool(note.embedding)
        return response
