"""
SQLAlchemy model for AI usage logs.
"""

from sqlalchemy import BigInteger, Column, ForeignKey, Index, Integer, String

from .base import Base


class AIUsageLogModel(Base):
    """One record per third-party AI call, for billing and analytics."""

    __tablename__ = "ai_usage_logs"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action_type = Column(String(30), nullable=False)
    model_name = Column(String(255), nullable=True)
    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    cost_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(BigInteger, nullable=False)  # Epoch timestamp in milliseconds

    __table_args__ = (Index("ix_ai_usage_logs_user_id_created_at", "user_id", "created_at"),)
