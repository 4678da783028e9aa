"""
AI usage response DTOs.
"""

from typing import Optional

from .base_responses import BaseTimestampResponse


class AIUsageLogResponse(BaseTimestampResponse):
    id: str
    user_id: str
    action_type: str
    model_name: Optional[str] = None
    input_tokens: int
    output_tokens: int
    cost_cents: int
    created_at: int
