"""
SQLAlchemy model for project tasks.
"""

from sqlalchemy import JSON, BigInteger, Column, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class TaskModel(Base):
    """SQLAlchemy model for tasks belonging to a project."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="todo")
    priority = Column(String(10), nullable=False, default="medium")
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    assignee_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    creator_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    start_date = Column(BigInteger, nullable=True)
    due_date = Column(BigInteger, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=True)
    tags = Column(JSON, nullable=True)
    dependencies = Column(JSON, nullable=True)  # List of task ids in the same project
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
    updated_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    __table_args__ = (
        Index("ix_tasks_project_id", "project_id"),
        Index("ix_tasks_assignee_id", "assignee_id"),
        Index("ix_tasks_due_date", "due_date"),
    )

    # Relationships
    project = relationship("ProjectModel", back_populates="tasks")
    assignee = relationship("UserModel", foreign_keys=[assignee_id])
    creator = relationship("UserModel", foreign_keys=[creator_id])
