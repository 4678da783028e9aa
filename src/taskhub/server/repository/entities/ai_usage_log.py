"""
AI usage log domain entity.
"""

from typing import Optional

from pydantic import BaseModel


class AIUsageLog(BaseModel):
    id: str
    user_id: str
    action_type: str
    model_name: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    cost_cents: int = 0
    created_at: int
