"""
Request DTOs for note endpoints.
"""

from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

MAX_TAGS = 10
MAX_TAG_LENGTH = 50


def _check_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    if len(tags) > MAX_TAGS:
        raise ValueError(f"At most {MAX_TAGS} tags are allowed")
    for tag in tags:
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
    return tags


NoteTags = Annotated[Optional[List[str]], AfterValidator(_check_tags)]


class CreateNoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field("Untitled", min_length=1, max_length=200)
    content: Optional[str] = Field(None, max_length=50000)
    notebook_id: Optional[str] = Field(None, alias="notebookId")
    tags: NoteTags = None
    is_favorite: bool = Field(False, alias="isFavorite")
    is_archived: bool = Field(False, alias="isArchived")


class UpdateNoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, max_length=50000)
    notebook_id: Optional[str] = Field(None, alias="notebookId")
    tags: NoteTags = None
    is_favorite: Optional[bool] = Field(None, alias="isFavorite")
    is_archived: Optional[bool] = Field(None, alias="isArchived")


class NoteFilter(BaseModel):
    """Domain model for filtering a user's notes."""

    notebook_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_favorite: Optional[bool] = None
    is_archived: Optional[bool] = None
    search: Optional[str] = None
