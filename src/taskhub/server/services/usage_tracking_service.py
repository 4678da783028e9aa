"""
Service for recording and summarizing AI usage.
"""

import logging
import math
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...shared.utils import datetime_to_epoch_ms, epoch_ms_to_datetime, now_epoch_ms
from ..repository.entities.ai_usage_log import AIUsageLog
from ..repository.interfaces import IAIUsageLogRepository
from ..utils.text_utils import estimate_tokens

log = logging.getLogger(__name__)

ACTION_TYPES = (
    "generate",
    "rewrite",
    "summarize",
    "extract_todos",
    "search",
    "translate",
    "assistant_qa",
    "analyze",
)
COST_CENTS_PER_TOKEN = 0.01
MONTHLY_USAGE_MONTHS = 6


def estimate_cost_cents(total_tokens: int) -> int:
    return math.floor(total_tokens * COST_CENTS_PER_TOKEN + 0.5)


def _month_key(dt: datetime) -> str:
    return dt.strftime("%Y-%m")


def _recent_month_starts(now_ms: int, months: int) -> List[datetime]:
    """First instant of each of the last ``months`` calendar months, oldest first."""
    current = epoch_ms_to_datetime(now_ms).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    starts = []
    year, month = current.year, current.month
    for _ in range(months):
        starts.append(current.replace(year=year, month=month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


class UsageTrackingService:
    def __init__(self, usage_repository: IAIUsageLogRepository):
        self.usage_repository = usage_repository

    def record_usage(
        self,
        user_id: str,
        action_type: str,
        model_name: Optional[str] = None,
        input_text: Optional[str] = None,
        output_text: Optional[str] = None,
        input_tokens: Optional[int] = None,
        output_tokens: Optional[int] = None,
        cost_cents: Optional[int] = None,
    ) -> AIUsageLog:
        """
        Store one usage record.

        Token counts default to an estimate from the input and output text,
        and the cost defaults to a flat rate over the total.
        """
        if action_type not in ACTION_TYPES:
            raise ValueError(f"Invalid action type: {action_type}")
        if input_tokens is None:
            input_tokens = estimate_tokens(input_text)
        if output_tokens is None:
            output_tokens = estimate_tokens(output_text)
        if cost_cents is None:
            cost_cents = estimate_cost_cents(input_tokens + output_tokens)

        entry = self.usage_repository.create(
            user_id=user_id,
            action_type=action_type,
            model_name=model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_cents=cost_cents,
        )
        log.debug(
            "Recorded AI usage %s for user %s (%d tokens)",
            action_type,
            user_id,
            input_tokens + output_tokens,
        )
        return entry

    def find_by_user(
        self, user_id: str, action_type: Optional[str] = None, limit: int = 20, offset: int = 0
    ) -> List[AIUsageLog]:
        return self.usage_repository.find_by_user(
            user_id, action_type=action_type or None, limit=limit, offset=offset
        )

    def recent(self, user_id: str, limit: int = 10) -> List[AIUsageLog]:
        return self.usage_repository.find_by_user(user_id, limit=limit)

    def usage_stats(
        self, user_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> Dict[str, int]:
        logs = self.usage_repository.find_in_range(user_id, start=start, end=end)
        return {
            "total_requests": len(logs),
            "total_input_tokens": sum(entry.input_tokens for entry in logs),
            "total_output_tokens": sum(entry.output_tokens for entry in logs),
            "total_cost_cents": sum(entry.cost_cents for entry in logs),
        }

    def stats_summary(self, user_id: str, now: Optional[int] = None) -> Dict[str, Any]:
        """
        Totals, a per-action breakdown and the last six months of usage.

        ``monthly_usage`` lists ``{month: "YYYY-MM", requests, tokens}`` for
        every one of the last six calendar months, oldest first.
        """
        now = now if now is not None else now_epoch_ms()
        logs = self.usage_repository.find_in_range(user_id)

        month_starts = _recent_month_starts(now, MONTHLY_USAGE_MONTHS)
        window_start = datetime_to_epoch_ms(month_starts[0])
        monthly = {_month_key(start): {"requests": 0, "tokens": 0} for start in month_starts}
        for entry in logs:
            if entry.created_at < window_start:
                continue
            bucket = monthly.get(_month_key(epoch_ms_to_datetime(entry.created_at)))
            if bucket is not None:
                bucket["requests"] += 1
                bucket["tokens"] += entry.input_tokens + entry.output_tokens

        return {
            "total_requests": len(logs),
            "total_tokens": sum(entry.input_tokens + entry.output_tokens for entry in logs),
            "requests_by_type": dict(Counter(entry.action_type for entry in logs)),
            "monthly_usage": [{"month": month, **values} for month, values in monthly.items()],
        }
