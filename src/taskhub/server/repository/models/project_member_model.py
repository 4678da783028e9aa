"""
SQLAlchemy model for project membership (junction table).
"""

from sqlalchemy import BigInteger, Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class ProjectMemberModel(Base):
    """
    SQLAlchemy model for project members.

    Tracks which users collaborate on which projects and with which role
    (admin, member or observer).
    """

    __tablename__ = "project_members"

    id = Column(String, primary_key=True)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    # Ensure a user can only be added once per project
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member"),
    )

    # Relationships
    project = relationship("ProjectModel", back_populates="members")
    user = relationship("UserModel")
