from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceStats:
    """Counts by status plus rates (percent, rounded half up)."""

    total: int
    present: int
    late: int
    absent: int
    sick: int
    leave: int
    excused: int
    attendance_rate: int
    punctuality_rate: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MonthlySummary(AttendanceStats):
    total_late_minutes: int
    total_early_departures: int


@dataclass(frozen=True)
class DailyDetail:
    """Read-model: one row of a monthly report."""

    date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    is_late: bool
    late_minutes: int
    is_early_departure: bool
    early_minutes: int
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "status": self.status.value,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "is_late": self.is_late,
            "late_minutes": self.late_minutes,
            "is_early_departure": self.is_early_departure,
            "early_minutes": self.early_minutes,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MonthlyReport:
    teacher_id: int
    month: int
    year: int
    summary: MonthlySummary
    daily_details: tuple[DailyDetail, ...]

    def to_dict(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "month": self.month,
            "year": self.year,
            "summary": self.summary.to_dict(),
            "daily_details": [d.to_dict() for d in self.daily_details],
        }
