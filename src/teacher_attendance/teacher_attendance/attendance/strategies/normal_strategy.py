from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, CheckInDecision, CheckOutDecision


class NormalStrategy(AttendanceStrategy):
    """Check-in within the grace period, check-out within the threshold."""

    def decide_checkin(self, *, now: datetime, expected: datetime) -> CheckInDecision:
        return CheckInDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, now: datetime, expected: datetime) -> CheckOutDecision:
        return CheckOutDecision()
