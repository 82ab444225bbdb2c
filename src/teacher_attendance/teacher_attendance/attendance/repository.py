from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_teacher_and_date(self, teacher_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_checkin(
        self,
        *,
        teacher_id: int,
        school_id: int,
        work_date: date,
        check_in_time: datetime,
        expected_check_in_time: str,
        expected_check_out_time: str,
        status: AttendanceStatus,
        is_late: bool,
        late_minutes: int,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Create the day's row, or fill in a placeholder row that has no check-in yet.

        A manually overridden placeholder only gains the check-in time and expected
        hours; its status, lateness and override audit fields stay untouched.
        Atomic per (teacher_id, work_date). Returns None when a check-in is already
        stored for that day, including when a concurrent call won the race.
        """

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        is_early_departure: bool,
        early_minutes: int,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Returns None when the row is already checked out (or was never checked in)."""

        raise NotImplementedError

    def apply_override(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reason: str,
        override_by: int,
        override_at: datetime,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_placeholder(
        self,
        *,
        teacher_id: int,
        school_id: int,
        work_date: date,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Pre-create a day without check-in (absent/sick/leave). None if the day exists."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        teacher_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by work_date ascending (then teacher_id)."""

        raise NotImplementedError

    def list_page(
        self,
        *,
        offset: int,
        limit: int,
        teacher_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        """Records ordered by work_date descending, plus the unpaginated total."""

        raise NotImplementedError
