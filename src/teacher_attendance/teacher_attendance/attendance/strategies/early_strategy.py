from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import whole_minutes
from .base import CheckOutDecision
from .normal_strategy import NormalStrategy


class EarlyLeaveStrategy(NormalStrategy):
    """Check-out before the expected time by more than the school's threshold."""

    def decide_checkout(self, *, now: datetime, expected: datetime) -> CheckOutDecision:
        return CheckOutDecision(
            is_early_departure=True,
            early_minutes=max(whole_minutes(expected - now), 0),
        )
