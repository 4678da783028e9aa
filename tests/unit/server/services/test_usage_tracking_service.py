"""
Unit tests for AI usage cost estimation and range totals.
"""

from unittest.mock import MagicMock

import pytest

from taskhub.server.repository.entities.ai_usage_log import AIUsageLog
from taskhub.server.services.usage_tracking_service import (
    UsageTrackingService,
    estimate_cost_cents,
)


def _log(input_tokens, output_tokens, cost_cents, created_at=1_000):
    return AIUsageLog(
        id=f"log-{created_at}-{input_tokens}",
        user_id="user-1",
        action_type="generate",
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cost_cents=cost_cents,
        created_at=created_at,
    )


class TestEstimateCostCents:
    @pytest.mark.parametrize(
        "tokens,expected",
        [(0, 0), (49, 0), (50, 1), (249, 2), (250, 3), (350, 4), (1000, 10)],
    )
    def test_rounds_half_up(self, tokens, expected):
        assert estimate_cost_cents(tokens) == expected


class TestUsageStats:
    def setup_method(self):
        self.usage_repository = MagicMock()
        self.service = UsageTrackingService(self.usage_repository)

    def test_totals_over_date_range(self):
        self.usage_repository.find_in_range.return_value = [_log(100, 50, 2), _log(30, 20, 1)]

        stats = self.service.usage_stats("user-1", start=1_000, end=5_000)

        self.usage_repository.find_in_range.assert_called_once_with("user-1", start=1_000, end=5_000)
        assert stats == {
            "total_requests": 2,
            "total_input_tokens": 130,
            "total_output_tokens": 70,
            "total_cost_cents": 3,
        }

    def test_no_usage(self):
        self.usage_repository.find_in_range.return_value = []

        stats = self.service.usage_stats("user-1")

        self.usage_repository.find_in_range.assert_called_once_with("user-1", start=None, end=None)
        assert stats == {
            "total_requests": 0,
            "total_input_tokens": 0,
            "total_output_tokens": 0,
            "total_cost_cents": 0,
        }
