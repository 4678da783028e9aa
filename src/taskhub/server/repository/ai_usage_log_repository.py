"""
Repository implementation for AI usage logs.
"""

import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from .entities.ai_usage_log import AIUsageLog
from .interfaces import IAIUsageLogRepository
from .models import AIUsageLogModel


class AIUsageLogRepository(IAIUsageLogRepository):
    """SQLAlchemy implementation of AI usage log repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(
        self,
        user_id: str,
        action_type: str,
        model_name: Optional[str] = None,
        input_tokens: int = 0,
        output_tokens: int = 0,
        cost_cents: int = 0,
    ) -> AIUsageLog:
        model = AIUsageLogModel(
            id=str(uuid.uuid4()),
            user_id=user_id,
            action_type=action_type,
            model_name=model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_cents=cost_cents,
            created_at=now_epoch_ms(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def find_by_user(
        self,
        user_id: str,
        action_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[AIUsageLog]:
        query = self.db.query(AIUsageLogModel).filter(AIUsageLogModel.user_id == user_id)
        if action_type:
            query = query.filter(AIUsageLogModel.action_type == action_type)
        models = (
            query.order_by(AIUsageLogModel.created_at.desc(), AIUsageLogModel.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._model_to_entity(m) for m in models]

    def find_in_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> List[AIUsageLog]:
        query = self.db.query(AIUsageLogModel).filter(AIUsageLogModel.user_id == user_id)
        if start is not None:
            query = query.filter(AIUsageLogModel.created_at >= start)
        if end is not None:
            query = query.filter(AIUsageLogModel.created_at < end)
        return [self._model_to_entity(m) for m in query.all()]

    def count_by_date_range(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        query = self.db.query(func.count(AIUsageLogModel.id)).filter(
            AIUsageLogModel.user_id == user_id
        )
        if start is not None:
            query = query.filter(AIUsageLogModel.created_at >= start)
        if end is not None:
            query = query.filter(AIUsageLogModel.created_at < end)
        return query.scalar() or 0

    def _model_to_entity(self, model: AIUsageLogModel) -> AIUsageLog:
        return AIUsageLog(
            id=model.id,
            user_id=model.user_id,
            action_type=model.action_type,
            model_name=model.model_name,
            input_tokens=model.input_tokens or 0,
            output_tokens=model.output_tokens or 0,
            cost_cents=model.cost_cents or 0,
            created_at=model.created_at,
        )
