from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one teacher's attendance for one school-local day."""

    attendance_id: int
    teacher_id: int
    school_id: int
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    expected_check_in_time: Optional[str] = None
    expected_check_out_time: Optional[str] = None
    is_late: bool = False
    late_minutes: int = 0
    is_early_departure: bool = False
    early_minutes: int = 0
    is_manual_override: bool = False
    manual_reason: Optional[str] = None
    override_by: Optional[int] = None
    override_at: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def has_checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def has_checked_out(self) -> bool:
        return self.check_out_time is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "teacher_id": self.teacher_id,
            "school_id": self.school_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "expected_check_in_time": self.expected_check_in_time,
            "expected_check_out_time": self.expected_check_out_time,
            "is_late": self.is_late,
            "late_minutes": self.late_minutes,
            "is_early_departure": self.is_early_departure,
            "early_minutes": self.early_minutes,
            "is_manual_override": self.is_manual_override,
            "manual_reason": self.manual_reason,
            "override_by": self.override_by,
            "override_at": self.override_at.isoformat() if self.override_at else None,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    is_late: bool
    late_minutes: int
    expected_check_out: str


@dataclass(frozen=True)
class CheckOutResult:
    record: AttendanceRecord
    is_early_departure: bool
    early_minutes: int


@dataclass(frozen=True)
class AttendancePage:
    """Read-model for paginated admin listings."""

    items: list[AttendanceRecord]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
