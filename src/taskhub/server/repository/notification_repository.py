"""
Repository implementation for notifications.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from .entities.notification import Notification
from .interfaces import INotificationRepository
from .models import NotificationModel, TodoModel


class NotificationRepository(INotificationRepository):
    """SQLAlchemy implementation of notification repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        todo_id: Optional[str] = None,
    ) -> Notification:
        now = now_epoch_ms()
        model = NotificationModel(
            id=str(uuid.uuid4()),
            user_id=user_id,
            todo_id=todo_id,
            type=notification_type,
            title=title,
            message=message,
            is_read=False,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model, None)

    def find_by_user(
        self,
        user_id: str,
        is_read: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Notification], int]:
        """Newest first, joined with the related todo's title and due date."""
        query = (
            self.db.query(NotificationModel, TodoModel)
            .outerjoin(TodoModel, TodoModel.id == NotificationModel.todo_id)
            .filter(NotificationModel.user_id == user_id)
        )
        if is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(is_read))

        total = query.count()
        rows = (
            query.order_by(NotificationModel.created_at.desc(), NotificationModel.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._model_to_entity(n, t) for n, t in rows], total

    def count_unread(self, user_id: str) -> int:
        return (
            self.db.query(func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
            .scalar()
            or 0
        )

    def exists_for_todo(self, todo_id: str, notification_type: str) -> bool:
        return (
            self.db.query(NotificationModel.id)
            .filter(
                NotificationModel.todo_id == todo_id,
                NotificationModel.type == notification_type,
            )
            .first()
            is not None
        )

    def mark_read(self, notification_id: str, user_id: str) -> bool:
        result = (
            self.db.query(NotificationModel)
            .filter(NotificationModel.id == notification_id, NotificationModel.user_id == user_id)
            .update({"is_read": True, "updated_at": now_epoch_ms()}, synchronize_session=False)
        )
        self.db.commit()
        return result > 0

    def mark_all_read(self, user_id: str) -> int:
        result = (
            self.db.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
            .update({"is_read": True, "updated_at": now_epoch_ms()}, synchronize_session=False)
        )
        self.db.commit()
        return result

    def delete_by_todo(self, todo_id: str) -> int:
        result = (
            self.db.query(NotificationModel)
            .filter(NotificationModel.todo_id == todo_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return result

    def delete_read_before(self, cutoff_ms: int, user_id: Optional[str] = None) -> int:
        """Delete read notifications last updated before the cutoff."""
        query = self.db.query(NotificationModel).filter(
            NotificationModel.is_read.is_(True),
            NotificationModel.updated_at < cutoff_ms,
        )
        if user_id is not None:
            query = query.filter(NotificationModel.user_id == user_id)
        result = query.delete(synchronize_session=False)
        self.db.commit()
        return result

    def _model_to_entity(
        self, model: NotificationModel, todo: Optional[TodoModel]
    ) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            todo_id=model.todo_id,
            type=model.type,
            title=model.title,
            message=model.message,
            is_read=bool(model.is_read),
            created_at=model.created_at,
            updated_at=model.updated_at,
            todo_title=todo.title if todo else None,
            todo_due_date=todo.due_date if todo else None,
        )
