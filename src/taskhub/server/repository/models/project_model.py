"""
SQLAlchemy model for project data.
"""

from sqlalchemy import JSON, BigInteger, Column, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class ProjectModel(Base):
    """SQLAlchemy model for projects (self-referential via parent_id)."""

    __tablename__ = "projects"

    id = Column(String, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="planning")
    priority = Column(String(10), nullable=False, default="medium")
    parent_id = Column(String, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    owner_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    start_date = Column(BigInteger, nullable=True)
    end_date = Column(BigInteger, nullable=True)
    progress = Column(Float, nullable=False, default=0)
    tags = Column(JSON, nullable=True)
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
    updated_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    __table_args__ = (
        Index("ix_projects_owner_id", "owner_id"),
        Index("ix_projects_parent_id", "parent_id"),
    )

    # Relationships
    members = relationship(
        "ProjectMemberModel",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tasks = relationship(
        "TaskModel",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
