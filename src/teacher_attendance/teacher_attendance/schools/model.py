from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    DEFAULT_CHECK_IN_TIME,
    DEFAULT_CHECK_OUT_TIME,
    DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES,
    DEFAULT_GRACE_PERIOD_MINUTES,
)


@dataclass(frozen=True)
class SchoolAttendanceConfig:
    """Per-school teacher working hours, read fresh for every check-in/check-out."""

    school_id: int
    teacher_check_in_time: str = DEFAULT_CHECK_IN_TIME
    teacher_check_out_time: str = DEFAULT_CHECK_OUT_TIME
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    early_departure_threshold_minutes: int = DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES
    timezone: Optional[str] = None
