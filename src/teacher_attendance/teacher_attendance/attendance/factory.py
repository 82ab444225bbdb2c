from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import whole_minutes
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    Thresholds are passed per call: every school has its own and they are never cached.
    """

    def for_checkin(self, *, now: datetime, expected: datetime, grace_minutes: int) -> AttendanceStrategy:
        if whole_minutes(now - expected) > int(grace_minutes):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, now: datetime, expected: datetime, threshold_minutes: int) -> AttendanceStrategy:
        if whole_minutes(expected - now) > int(threshold_minutes):
            return EarlyLeaveStrategy()
        return NormalStrategy()
