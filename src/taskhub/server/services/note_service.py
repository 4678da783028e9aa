"""
Business service for notes: CRUD, search, tags, stats and embedding similarity.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from ...shared.api import PaginationParams
from ...shared.exceptions import EntityNotFoundError
from ...shared.utils import MS_PER_DAY, now_epoch_ms
from ..repository.entities.note import Note
from ..repository.interfaces import IAIUsageLogRepository, INoteRepository, ITodoRepository
from ..routers.dto.requests.note_requests import NoteFilter
from ..utils.text_utils import cosine_similarity, extract_text_from_content, parse_tags
from .ai_service import AIService

log = logging.getLogger(__name__)

GROWTH_WINDOW_MS = 7 * MS_PER_DAY
DEFAULT_SIMILARITY_THRESHOLD = 0.7
DEFAULT_SIMILAR_LIMIT = 10


def growth_percent(recent: int, older: int) -> int:
    """Recent activity as a percentage of everything older."""
    if older > 0:
        return math.floor(recent / older * 100 + 0.5)
    return 100 if recent > 0 else 0


class NoteService:
    """Service layer for note business logic. Every operation is scoped to one user."""

    def __init__(
        self,
        note_repository: INoteRepository,
        todo_repository: ITodoRepository,
        usage_repository: IAIUsageLogRepository,
        ai_service: Optional[AIService] = None,
    ):
        self.note_repository = note_repository
        self.todo_repository = todo_repository
        self.usage_repository = usage_repository
        self.ai_service = ai_service

    def _normalize_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        normalized = dict(data)
        if "content" in normalized:
            normalized["content_text"] = extract_text_from_content(normalized["content"])
        if "tags" in normalized:
            normalized["tags"] = parse_tags(normalized["tags"])
        if "title" in normalized:
            title = (normalized["title"] or "").strip()
            if not title:
                raise ValueError("Note title cannot be empty")
            normalized["title"] = title
        return normalized

    def _require_note(self, note_id: str, user_id: str) -> Note:
        note = self.note_repository.find_by_id(note_id, user_id)
        if not note:
            raise EntityNotFoundError("Note", note_id)
        return note

    def create_note(self, user_id: str, note_data: Dict[str, Any]) -> Note:
        data = self._normalize_fields(note_data)
        note = self.note_repository.create(user_id, data)
        log.info("Created note %s for user %s", note.id, user_id)
        return note

    def get_note(self, note_id: str, user_id: str) -> Note:
        return self._require_note(note_id, user_id)

    def update_note(self, note_id: str, user_id: str, update_data: Dict[str, Any]) -> Note:
        """
        Apply a partial update. ``content_text`` is recomputed whenever
        ``content`` is part of the update.

        Raises:
            EntityNotFoundError: If the note does not exist for this user
        """
        existing = self._require_note(note_id, user_id)
        data = self._normalize_fields(update_data)
        if not data:
            return existing
        updated = self.note_repository.update(note_id, user_id, data)
        if not updated:
            raise EntityNotFoundError("Note", note_id)
        return updated

    def delete_note(self, note_id: str, user_id: str) -> None:
        if not self.note_repository.delete(note_id, user_id):
            raise EntityNotFoundError("Note", note_id)
        log.info("Deleted note %s for user %s", note_id, user_id)

    def list_notes(
        self,
        user_id: str,
        note_filter: Optional[NoteFilter] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Note], int]:
        return self.note_repository.search(user_id, note_filter or NoteFilter(), pagination)

    def search_notes(self, user_id: str, query: Optional[str], limit: int = 10) -> Tuple[List[Note], int]:
        if not query or not query.strip():
            raise ValueError("Search query is required")
        note_filter = NoteFilter(search=query.strip())
        return self.note_repository.search(
            user_id, note_filter, PaginationParams(page=1, limit=max(1, min(limit, 100)))
        )

    def get_tags(self, user_id: str) -> List[str]:
        tags = set()
        for note in self.note_repository.find_by_user(user_id):
            tags.update(note.tags)
        return sorted(tags)

    def toggle_favorite(self, note_id: str, user_id: str) -> Note:
        note = self._require_note(note_id, user_id)
        return self.note_repository.update(note_id, user_id, {"is_favorite": not note.is_favorite})

    def toggle_archive(self, note_id: str, user_id: str) -> Note:
        note = self._require_note(note_id, user_id)
        return self.note_repository.update(note_id, user_id, {"is_archived": not note.is_archived})

    def count_by_date_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        return self.note_repository.count_by_date_range(user_id, start, end)

    def get_stats(self, user_id: str, now: Optional[int] = None) -> Dict[str, int]:
        now = now if now is not None else now_epoch_ms()
        cutoff = now - GROWTH_WINDOW_MS

        total_notes, favorite_notes, archived_notes = self.note_repository.count_flags(user_id)
        older_notes = self.note_repository.count_by_date_range(user_id, end=cutoff)

        ai_usage = self.usage_repository.count_by_date_range(user_id)
        older_ai_usage = self.usage_repository.count_by_date_range(user_id, end=cutoff)

        total_todos, completed_todos = self.todo_repository.count_completed(user_id)

        return {
            "total_notes": total_notes,
            "favorite_notes": favorite_notes,
            "archived_notes": archived_notes,
            "notes_growth_percent": growth_percent(total_notes - older_notes, older_notes),
            "ai_usage": ai_usage,
            "ai_usage_growth": growth_percent(ai_usage - older_ai_usage, older_ai_usage),
            "total_todos": total_todos,
            "completed_todos": completed_todos,
        }

    def _require_ai(self) -> AIService:
        if self.ai_service is None:
            raise ValueError("AI service is not available")
        return self.ai_service

    async def generate_embedding(self, note_id: str, user_id: str) -> Note:
        """Embed the note's title and text and store the vector on the note."""
        note = self._require_note(note_id, user_id)
        text = "\n".join(part for part in (note.title, note.content_text) if part)
        embedding = await self._require_ai().generate_embedding(text)
        return self.note_repository.update(note_id, user_id, {"embedding": embedding})

    async def find_similar(
        self,
        user_id: str,
        query: Optional[str],
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        limit: int = DEFAULT_SIMILAR_LIMIT,
    ) -> List[Note]:
        """
        Return notes whose embedding's cosine similarity to the query is at or
        above ``threshold``, most similar first.
        """
        if not query or not query.strip():
            raise ValueError("Search query is required")
        query_embedding = await self._require_ai().generate_embedding(query.strip())

        scored = []
        for note in self.note_repository.find_with_embeddings(user_id):
            similarity = cosine_similarity(query_embedding, note.embedding)
            if similarity >= threshold:
                scored.append(note.model_copy(update={"similarity": round(similarity, 4)}))
        scored.sort(key=lambda n: n.similarity, reverse=True)
        return scored[:limit]
