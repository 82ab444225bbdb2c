from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import whole_minutes
from ...core.enums import AttendanceStatus
from .base import CheckInDecision
from .normal_strategy import NormalStrategy


class LateStrategy(NormalStrategy):
    """Late check-in; lateness is counted from the expected time, not from the end of grace."""

    def decide_checkin(self, *, now: datetime, expected: datetime) -> CheckInDecision:
        return CheckInDecision(
            status=AttendanceStatus.LATE,
            is_late=True,
            late_minutes=max(whole_minutes(now - expected), 0),
        )
