"""
SQLAlchemy model for notes.
"""

from sqlalchemy import JSON, BigInteger, Boolean, Column, ForeignKey, Index, String, Text

from .base import Base


class NoteModel(Base):
    """SQLAlchemy model for user notes."""

    __tablename__ = "notes"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    notebook_id = Column(String, nullable=True)
    title = Column(String(200), nullable=False, default="Untitled")
    content = Column(Text, nullable=True)
    content_text = Column(Text, nullable=True)  # Plain text derived from content
    tags = Column(JSON, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)
    embedding = Column(JSON, nullable=True)
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
    updated_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    __table_args__ = (Index("ix_notes_user_id_updated_at", "user_id", "updated_at"),)
