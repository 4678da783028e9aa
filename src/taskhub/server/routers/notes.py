"""
Note endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...shared.api import DataResponse, create_data_response, create_paginated_response, get_pagination_or_default
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_note_service
from ..services.note_service import DEFAULT_SIMILAR_LIMIT, DEFAULT_SIMILARITY_THRESHOLD, NoteService
from ..utils.text_utils import parse_tags
from .dto.requests.note_requests import CreateNoteRequest, NoteFilter, UpdateNoteRequest
from .dto.responses.note_responses import NoteResponse

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/notes")
async def list_notes(
    notebook_id: Optional[str] = Query(None),
    tags: Optional[str] = Query(None, description="Comma separated; matches any"),
    is_favorite: Optional[bool] = Query(None),
    is_archived: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    pagination = get_pagination_or_default(page, limit)
    try:
        note_filter = NoteFilter(
            notebook_id=notebook_id or None,
            tags=parse_tags(tags),
            is_favorite=is_favorite,
            is_archived=is_archived,
            search=search.strip() if search and search.strip() else None,
        )
        notes, total = note_service.list_notes(user_id, note_filter, pagination)
        return create_paginated_response(
            [NoteResponse.from_entity(n) for n in notes], pagination, total, key="notes"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error listing notes for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve notes",
        )


@router.get("/notes/stats")
async def get_note_stats(
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(note_service.get_stats(user_id))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing note stats for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve note stats",
        )


@router.get("/notes/search")
async def search_notes(
    query: Optional[str] = Query(None),
    limit: int = Query(10),
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        notes, total = note_service.search_notes(user_id, query, limit=limit)
        return create_data_response(
            {
                "notes": [NoteResponse.from_entity(n) for n in notes],
                "total": total,
                "query": query,
            }
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error searching notes for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search notes",
        )


@router.get("/notes/tags")
async def get_note_tags(
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response({"tags": note_service.get_tags(user_id)})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing note tags for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve note tags",
        )


@router.get("/notes/similar")
async def find_similar_notes(
    query: Optional[str] = Query(None),
    threshold: float = Query(DEFAULT_SIMILARITY_THRESHOLD, ge=-1, le=1),
    limit: int = Query(DEFAULT_SIMILAR_LIMIT, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    """Notes whose embedding is at least ``threshold`` similar to the query."""
    user_id = user.get("id")
    try:
        notes = await note_service.find_similar(user_id, query, threshold=threshold, limit=limit)
        return create_data_response({"notes": [NoteResponse.from_entity(n) for n in notes]})
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error finding similar notes for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to find similar notes",
        )


@router.post("/notes", status_code=status.HTTP_201_CREATED)
async def create_note(
    request: CreateNoteRequest,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        note = note_service.create_note(user_id, request.model_dump())
        return create_data_response(NoteResponse.from_entity(note), message="Note created successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error creating note for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create note",
        )


@router.get("/notes/{note_id}")
async def get_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(NoteResponse.from_entity(note_service.get_note(note_id, user_id)))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching note %s: %s", note_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve note",
        )


@router.put("/notes/{note_id}")
async def update_note(
    note_id: str,
    request: UpdateNoteRequest,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        note = note_service.update_note(note_id, user_id, request.model_dump(exclude_unset=True))
        return create_data_response(NoteResponse.from_entity(note), message="Note updated successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error updating note %s: %s", note_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update note",
        )


@router.delete("/notes/{note_id}")
async def delete_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        note_service.delete_note(note_id, user_id)
        return create_data_response(message="Note deleted successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error deleting note %s: %s", note_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete note",
        )


@router.patch("/notes/{note_id}/favorite")
async def toggle_favorite(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(NoteResponse.from_entity(note_service.toggle_favorite(note_id, user_id)))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error toggling favorite on note %s: %s", note_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update note",
        )


@router.patch("/notes/{note_id}/archive")
async def toggle_archive(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(NoteResponse.from_entity(note_service.toggle_archive(note_id, user_id)))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error toggling archive on note %s: %s", note_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update note",
        )


@router.post("/notes/{note_id}/embedding")
async def generate_note_embedding(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        note = await note_service.generate_embedding(note_id, user_id)
        return create_data_response(
            NoteResponse.from_entity(note), message="Embedding generated successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error generating embedding for note %s: %s", note_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate embedding",
        )
