"""
SQLAlchemy model for user notifications.
"""

from sqlalchemy import BigInteger, Boolean, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class NotificationModel(Base):
    """SQLAlchemy model for notifications (todo reminders and ad-hoc messages)."""

    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    todo_id = Column(String, ForeignKey("todos.id", ondelete="CASCADE"), nullable=True)
    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
    updated_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    __table_args__ = (
        Index("ix_notifications_user_id_is_read", "user_id", "is_read"),
        Index("ix_notifications_todo_id_type", "todo_id", "type"),
    )

    todo = relationship("TodoModel")
