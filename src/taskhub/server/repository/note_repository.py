"""
Repository implementation for note data access operations.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from ...shared.api import PaginationParams
from ..routers.dto.requests.note_requests import NoteFilter
from ..utils.text_utils import tags_overlap
from .entities.note import Note
from .interfaces import INoteRepository
from .models import NoteModel

_UPDATABLE_FIELDS = (
    "title",
    "content",
    "content_text",
    "notebook_id",
    "tags",
    "is_favorite",
    "is_archived",
    "embedding",
)


class NoteRepository(INoteRepository):
    """SQLAlchemy implementation of note repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(self, user_id: str, note_data: dict) -> Note:
        now = now_epoch_ms()
        model = NoteModel(
            id=str(uuid.uuid4()),
            user_id=user_id,
            notebook_id=note_data.get("notebook_id"),
            title=note_data.get("title") or "Untitled",
            content=note_data.get("content"),
            content_text=note_data.get("content_text"),
            tags=note_data.get("tags") or [],
            is_favorite=bool(note_data.get("is_favorite", False)),
            is_archived=bool(note_data.get("is_archived", False)),
            embedding=note_data.get("embedding"),
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def find_by_id(self, note_id: str, user_id: str) -> Optional[Note]:
        model = (
            self.db.query(NoteModel)
            .filter(NoteModel.id == note_id, NoteModel.user_id == user_id)
            .first()
        )
        return self._model_to_entity(model) if model else None

    def find_by_user(self, user_id: str) -> List[Note]:
        models = (
            self.db.query(NoteModel)
            .filter(NoteModel.user_id == user_id)
            .order_by(NoteModel.updated_at.desc())
            .all()
        )
        return [self._model_to_entity(m) for m in models]

    def find_with_embeddings(self, user_id: str) -> List[Note]:
        models = (
            self.db.query(NoteModel)
            .filter(NoteModel.user_id == user_id, NoteModel.embedding.isnot(None))
            .all()
        )
        return [self._model_to_entity(m) for m in models if m.embedding]

    def search(
        self,
        user_id: str,
        note_filter: NoteFilter,
        pagination: Optional[PaginationParams] = None,
    ) -> Tuple[List[Note], int]:
        """Filter a user's notes, newest update first. Tags match on any overlap."""
        query = self.db.query(NoteModel).filter(NoteModel.user_id == user_id)

        if note_filter.notebook_id:
            query = query.filter(NoteModel.notebook_id == note_filter.notebook_id)
        if note_filter.is_favorite is not None:
            query = query.filter(NoteModel.is_favorite.is_(note_filter.is_favorite))
        if note_filter.is_archived is not None:
            query = query.filter(NoteModel.is_archived.is_(note_filter.is_archived))
        if note_filter.search:
            pattern = f"%{note_filter.search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(NoteModel.title).like(pattern),
                    func.lower(NoteModel.content_text).like(pattern),
                )
            )

        models = query.order_by(NoteModel.updated_at.desc(), NoteModel.id.asc()).all()
        if note_filter.tags:
            models = [m for m in models if tags_overlap(m.tags, note_filter.tags)]

        total = len(models)
        if pagination:
            models = models[pagination.offset : pagination.offset + pagination.limit]
        return [self._model_to_entity(m) for m in models], total

    def count_by_date_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        """Count notes created in ``[start, end)``; either bound may be omitted."""
        query = self.db.query(func.count(NoteModel.id)).filter(NoteModel.user_id == user_id)
        if start is not None:
            query = query.filter(NoteModel.created_at >= start)
        if end is not None:
            query = query.filter(NoteModel.created_at < end)
        return query.scalar() or 0

    def count_flags(self, user_id: str) -> Tuple[int, int, int]:
        """Return (total, favorite, archived) note counts."""
        base = self.db.query(func.count(NoteModel.id)).filter(NoteModel.user_id == user_id)
        total = base.scalar() or 0
        favorite = base.filter(NoteModel.is_favorite.is_(True)).scalar() or 0
        archived = base.filter(NoteModel.is_archived.is_(True)).scalar() or 0
        return total, favorite, archived

    def update(self, note_id: str, user_id: str, update_data: dict) -> Optional[Note]:
        model = (
            self.db.query(NoteModel)
            .filter(NoteModel.id == note_id, NoteModel.user_id == user_id)
            .first()
        )
        if not model:
            return None

        for field in _UPDATABLE_FIELDS:
            if field in update_data:
                setattr(model, field, update_data[field])

        model.updated_at = now_epoch_ms()
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def delete(self, note_id: str, user_id: str) -> bool:
        result = (
            self.db.query(NoteModel)
            .filter(NoteModel.id == note_id, NoteModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return result > 0

    def _model_to_entity(self, model: NoteModel) -> Note:
        return Note(
            id=model.id,
            user_id=model.user_id,
            notebook_id=model.notebook_id,
            title=model.title,
            content=model.content,
            content_text=model.content_text,
            tags=model.tags or [],
            is_favorite=bool(model.is_favorite),
            is_archived=bool(model.is_archived),
            embedding=model.embedding,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
