from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import at_time, now_local, to_school_local
from ..common.validators import optional_text, require_min_length
from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, MIN_OVERRIDE_REASON_LENGTH
from ..core.enums import ABSENCE_STATUSES, AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedInYet,
    RecordNotFound,
    SchoolConfigNotFound,
    TeacherNotFound,
    ValidationError,
)
from ..schools.model import SchoolAttendanceConfig
from ..schools.repository import SchoolRepository
from ..teachers.model import Teacher
from ..teachers.repository import TeacherRepository
from .factory import AttendanceStrategyFactory
from .model import AttendancePage, AttendanceRecord, CheckInResult, CheckOutResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases: teacher check-in/check-out, supervisor overrides and listings."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        teachers: TeacherRepository,
        schools: SchoolRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._teachers = teachers
        self._schools = schools
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def _get_teacher(self, teacher_id: int) -> Teacher:
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher or not teacher.is_active:
            raise TeacherNotFound(f"Teacher {teacher_id} not found")
        return teacher

    def _get_config(self, school_id: int) -> SchoolAttendanceConfig:
        # Read on every call: edits to school hours apply to the next check-in.
        config = self._schools.get_attendance_config(int(school_id))
        if not config:
            raise SchoolConfigNotFound(f"No attendance settings for school {school_id}")
        return config

    def check_in(self, teacher_id: int, *, now: datetime | None = None, notes: Optional[str] = None) -> CheckInResult:
        teacher = self._get_teacher(teacher_id)
        config = self._get_config(teacher.school_id)

        now = to_school_local(now or now_local(), config.timezone)
        today = now.date()

        existing = self._attendance.get_for_teacher_and_date(teacher.teacher_id, today)
        if existing and existing.has_checked_in:
            raise AlreadyCheckedIn("Already checked in today")

        expected = at_time(today, config.teacher_check_in_time)
        strategy = self._factory.for_checkin(now=now, expected=expected, grace_minutes=config.grace_period_minutes)
        decision = strategy.decide_checkin(now=now, expected=expected)

        record = self._attendance.upsert_checkin(
            teacher_id=teacher.teacher_id,
            school_id=teacher.school_id,
            work_date=today,
            check_in_time=now,
            expected_check_in_time=config.teacher_check_in_time,
            expected_check_out_time=config.teacher_check_out_time,
            status=decision.status,
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
            notes=optional_text(notes),
        )
        if record is None:
            raise AlreadyCheckedIn("Already checked in today")

        logger.info(
            "Check-in teacher=%s date=%s status=%s late_minutes=%s",
            record.teacher_id,
            today,
            record.status.value,
            record.late_minutes,
        )
        # An overridden placeholder keeps the supervisor's status and lateness.
        return CheckInResult(
            record=record,
            is_late=record.is_late,
            late_minutes=record.late_minutes,
            expected_check_out=config.teacher_check_out_time,
        )

    def check_out(self, teacher_id: int, *, now: datetime | None = None, notes: Optional[str] = None) -> CheckOutResult:
        teacher = self._get_teacher(teacher_id)
        config = self._get_config(teacher.school_id)

        now = to_school_local(now or now_local(), config.timezone)
        today = now.date()

        record = self._attendance.get_for_teacher_and_date(teacher.teacher_id, today)
        if not record or not record.has_checked_in:
            raise NotCheckedInYet("Not checked in today")
        if record.has_checked_out:
            raise AlreadyCheckedOut("Already checked out today")
        if now < record.check_in_time:
            raise ValidationError("Check-out time cannot be earlier than check-in time")

        # The snapshot taken at check-in wins over today's config.
        expected = at_time(today, record.expected_check_out_time or config.teacher_check_out_time)
        strategy = self._factory.for_checkout(
            now=now,
            expected=expected,
            threshold_minutes=config.early_departure_threshold_minutes,
        )
        decision = strategy.decide_checkout(now=now, expected=expected)

        updated = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            is_early_departure=decision.is_early_departure,
            early_minutes=decision.early_minutes,
            notes=optional_text(notes),
        )
        if updated is None:
            raise AlreadyCheckedOut("Already checked out today")

        logger.info(
            "Check-out teacher=%s date=%s early_departure=%s early_minutes=%s status=%s",
            updated.teacher_id,
            today,
            decision.is_early_departure,
            decision.early_minutes,
            updated.status.value,
        )
        return CheckOutResult(
            record=updated,
            is_early_departure=decision.is_early_departure,
            early_minutes=decision.early_minutes,
        )

    def manual_override(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reason: str,
        overridden_by: int,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        reason = require_min_length(reason, "Reason", MIN_OVERRIDE_REASON_LENGTH)
        status = AttendanceStatus(status)
        current = self.get_record(attendance_id)

        record = self._attendance.apply_override(
            attendance_id=current.attendance_id,
            status=status,
            reason=reason,
            override_by=int(overridden_by),
            override_at=self.to_school_time(current.school_id, now or now_local()),
        )
        if record is None:
            raise RecordNotFound(f"Attendance record {attendance_id} not found")

        logger.info(
            "Manual override attendance=%s status=%s by=%s",
            record.attendance_id,
            record.status.value,
            overridden_by,
        )
        return record

    def record_absence(
        self,
        *,
        teacher_id: int,
        status: AttendanceStatus,
        work_date: Optional[date] = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        status = AttendanceStatus(status)
        if status not in ABSENCE_STATUSES:
            raise ValidationError("Only ABSENT, SICK or LEAVE can be recorded ahead of check-in")

        teacher = self._get_teacher(teacher_id)
        if work_date is None:
            work_date = self._school_today(teacher, now)
        record = self._attendance.create_placeholder(
            teacher_id=teacher.teacher_id,
            school_id=teacher.school_id,
            work_date=work_date,
            status=status,
            notes=optional_text(notes),
        )
        if record is None:
            raise ValidationError("An attendance record already exists for this day")

        logger.info("Recorded %s for teacher=%s date=%s", status.value, teacher.teacher_id, work_date)
        return record

    def _school_today(self, teacher: Teacher, now: datetime | None) -> date:
        config = self._get_config(teacher.school_id)
        return to_school_local(now or now_local(), config.timezone).date()

    def school_today(self, teacher_id: int, *, now: datetime | None = None) -> date:
        """The current calendar day at the teacher's school."""
        return self._school_today(self._get_teacher(teacher_id), now)

    def get_today_attendance(self, teacher_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        teacher = self._get_teacher(teacher_id)
        return self._attendance.get_for_teacher_and_date(teacher.teacher_id, self._school_today(teacher, now))

    def to_school_time(self, school_id: int, value: datetime) -> datetime:
        return to_school_local(value, self._get_config(school_id).timezone)

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if record is None:
            raise RecordNotFound(f"Attendance record {attendance_id} not found")
        return record

    def list_records(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        teacher_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AttendancePage:
        page = int(page)
        limit = int(limit)
        if page < 1:
            raise ValidationError("page must be >= 1")
        if not 1 <= limit <= MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
        if date_from and date_to and date_to < date_from:
            raise ValidationError("date_to must be >= date_from")

        items, total = self._attendance.list_page(
            offset=(page - 1) * limit,
            limit=limit,
            teacher_id=teacher_id,
            status=AttendanceStatus(status) if status else None,
            start_date=date_from,
            end_date=date_to,
        )
        return AttendancePage(items=list(items), page=page, limit=limit, total=int(total))
