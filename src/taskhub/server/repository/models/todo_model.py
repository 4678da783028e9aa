"""
SQLAlchemy model for personal todos.
"""

from sqlalchemy import BigInteger, Boolean, Column, ForeignKey, Index, String, Text

from .base import Base


class TodoModel(Base):
    """SQLAlchemy model for todos (personal reminders, distinct from tasks)."""

    __tablename__ = "todos"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    note_id = Column(String, ForeignKey("notes.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(BigInteger, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="not_started")
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
    updated_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    __table_args__ = (
        Index("ix_todos_user_id", "user_id"),
        Index("ix_todos_due_date", "due_date"),
    )
