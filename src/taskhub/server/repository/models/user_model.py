"""
SQLAlchemy model for user accounts.
"""

from sqlalchemy import BigInteger, Column, String

from .base import Base


class UserModel(Base):
    """SQLAlchemy model for users."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    auth_provider = Column(String(50), nullable=False, default="local")
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(String, nullable=True)
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
    updated_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds
