"""
Note domain entity.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Note(BaseModel):
    id: str
    user_id: str
    notebook_id: Optional[str] = None
    title: str = "Untitled"
    content: Optional[str] = None
    content_text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool = False
    is_archived: bool = False
    embedding: Optional[List[float]] = None
    created_at: int
    updated_at: int

    # Set by similarity search
    similarity: Optional[float] = None
