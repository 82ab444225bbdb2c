from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class CheckInDecision:
    status: AttendanceStatus
    is_late: bool = False
    late_minutes: int = 0


@dataclass(frozen=True)
class CheckOutDecision:
    is_early_departure: bool = False
    early_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we classify a check-in or a check-out.

    `expected` is the school's expected time on the same day as `now`.
    """

    @abstractmethod
    def decide_checkin(self, *, now: datetime, expected: datetime) -> CheckInDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, now: datetime, expected: datetime) -> CheckOutDecision:
        raise NotImplementedError
