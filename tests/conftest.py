from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from types import SimpleNamespace
from typing import Optional

import pytest

from src.teacher_attendance.teacher_attendance.attendance.model import AttendanceRecord
from src.teacher_attendance.teacher_attendance.attendance.service import AttendanceService
from src.teacher_attendance.teacher_attendance.core.enums import AttendanceStatus, RequestStatus
from src.teacher_attendance.teacher_attendance.reports.service import AttendanceReportService
from src.teacher_attendance.teacher_attendance.requests.model import EarlyDepartureRequest
from src.teacher_attendance.teacher_attendance.requests.service import EarlyDepartureService
from src.teacher_attendance.teacher_attendance.schools.model import SchoolAttendanceConfig
from src.teacher_attendance.teacher_attendance.teachers.model import Teacher


class FakeTeacherRepo:
    def __init__(self, teachers):
        self._teachers = {t.teacher_id: t for t in teachers}

    def get_by_id(self, teacher_id):
        return self._teachers.get(int(teacher_id))


class FakeSchoolRepo:
    def __init__(self, configs):
        self._configs = {c.school_id: c for c in configs}

    def get_attendance_config(self, school_id):
        return self._configs.get(int(school_id))

    def set(self, config: SchoolAttendanceConfig) -> None:
        self._configs[config.school_id] = config


class FakeAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self.rows[record.attendance_id] = record
        self._next_id = max(self._next_id, record.attendance_id + 1)
        return record

    def _new_id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid

    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def get_for_teacher_and_date(self, teacher_id, work_date):
        for r in self.rows.values():
            if r.teacher_id == int(teacher_id) and r.work_date == work_date:
                return r
        return None

    def upsert_checkin(
        self,
        *,
        teacher_id,
        school_id,
        work_date,
        check_in_time,
        expected_check_in_time,
        expected_check_out_time,
        status,
        is_late,
        late_minutes,
        notes=None,
    ):
        fields = dict(
            status=status,
            check_in_time=check_in_time,
            expected_check_in_time=expected_check_in_time,
            expected_check_out_time=expected_check_out_time,
            is_late=is_late,
            late_minutes=late_minutes,
        )
        existing = self.get_for_teacher_and_date(teacher_id, work_date)
        if existing:
            if existing.has_checked_in:
                return None
            if existing.is_manual_override:
                for key in ("status", "is_late", "late_minutes"):
                    fields.pop(key)
            updated = replace(existing, notes=notes or existing.notes, **fields)
            self.rows[existing.attendance_id] = updated
            return updated

        return self.add(
            AttendanceRecord(
                attendance_id=self._new_id(),
                teacher_id=teacher_id,
                school_id=school_id,
                work_date=work_date,
                notes=notes,
                **fields,
            )
        )

    def update_checkout(self, *, attendance_id, check_out_time, is_early_departure, early_minutes, notes=None):
        r = self.rows.get(int(attendance_id))
        if not r or not r.has_checked_in or r.has_checked_out:
            return None
        updated = replace(
            r,
            check_out_time=check_out_time,
            is_early_departure=is_early_departure,
            early_minutes=early_minutes,
            notes=notes or r.notes,
        )
        self.rows[r.attendance_id] = updated
        return updated

    def apply_override(self, *, attendance_id, status, reason, override_by, override_at):
        r = self.rows.get(int(attendance_id))
        if not r:
            return None
        updated = replace(
            r,
            status=status,
            is_manual_override=True,
            manual_reason=reason,
            override_by=override_by,
            override_at=override_at,
        )
        self.rows[r.attendance_id] = updated
        return updated

    def create_placeholder(self, *, teacher_id, school_id, work_date, status, notes=None):
        if self.get_for_teacher_and_date(teacher_id, work_date):
            return None
        return self.add(
            AttendanceRecord(
                attendance_id=self._new_id(),
                teacher_id=teacher_id,
                school_id=school_id,
                work_date=work_date,
                status=status,
                notes=notes,
            )
        )

    def _filter(self, *, teacher_id=None, status=None, start_date=None, end_date=None):
        out = []
        for r in self.rows.values():
            if teacher_id is not None and r.teacher_id != int(teacher_id):
                continue
            if status is not None and r.status != status:
                continue
            if start_date and r.work_date < start_date:
                continue
            if end_date and r.work_date > end_date:
                continue
            out.append(r)
        return out

    def list_range(self, *, teacher_id=None, start_date=None, end_date=None):
        rows = self._filter(teacher_id=teacher_id, start_date=start_date, end_date=end_date)
        return sorted(rows, key=lambda r: (r.work_date, r.teacher_id))

    def list_page(self, *, offset, limit, teacher_id=None, status=None, start_date=None, end_date=None):
        rows = self._filter(teacher_id=teacher_id, status=status, start_date=start_date, end_date=end_date)
        rows.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=True)
        return rows[offset : offset + limit], len(rows)


class FakeEarlyDepartureRepo:
    def __init__(self, attendance: FakeAttendanceRepo):
        self._attendance = attendance
        self._next_id = 1
        self.rows: dict[int, EarlyDepartureRequest] = {}

    def get_by_id(self, *, request_id):
        return self.rows.get(int(request_id))

    def get_pending_for_attendance(self, *, attendance_id):
        for r in self.rows.values():
            if r.attendance_id == int(attendance_id) and r.is_pending:
                return r
        return None

    def create_pending(self, *, attendance_id, school_id, planned_check_out_time, reason, created_at):
        if self.get_pending_for_attendance(attendance_id=attendance_id):
            return None
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = EarlyDepartureRequest(
            request_id=rid,
            attendance_id=int(attendance_id),
            school_id=int(school_id),
            planned_check_out_time=planned_check_out_time,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=created_at,
        )
        return self.rows[rid]

    def resolve(self, *, request_id, status, approved_by, approved_at, rejection_reason=None):
        req = self.rows.get(int(request_id))
        if not req or not req.is_pending:
            return None
        resolved = replace(
            req,
            status=status,
            approved_by=approved_by,
            approved_at=approved_at,
            rejection_reason=rejection_reason,
        )
        self.rows[req.request_id] = resolved
        if status == RequestStatus.APPROVED:
            record = self._attendance.rows[req.attendance_id]
            self._attendance.rows[req.attendance_id] = replace(record, status=AttendanceStatus.EXCUSED)
        return resolved

    def list_requests(self, *, status=None, school_id=None, limit=200):
        rows = [
            r
            for r in self.rows.values()
            if (status is None or r.status == status) and (school_id is None or r.school_id == int(school_id))
        ]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows[:limit]


def make_record(
    attendance_id: int,
    work_date: date,
    status: AttendanceStatus,
    *,
    teacher_id: int = 1,
    school_id: int = 1,
    check_in_time: Optional[datetime] = None,
    **extra,
) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=attendance_id,
        teacher_id=teacher_id,
        school_id=school_id,
        work_date=work_date,
        status=status,
        check_in_time=check_in_time,
        **extra,
    )


@pytest.fixture
def school_config():
    return SchoolAttendanceConfig(
        school_id=1,
        teacher_check_in_time="07:00",
        teacher_check_out_time="15:00",
        grace_period_minutes=15,
        early_departure_threshold_minutes=10,
    )


@pytest.fixture
def app_services(school_config):
    teachers = FakeTeacherRepo(
        [
            Teacher(teacher_id=1, school_id=1, full_name="Siti Rahma"),
            Teacher(teacher_id=2, school_id=1, full_name="Budi Santoso"),
            Teacher(teacher_id=3, school_id=1, full_name="Former Teacher", is_active=False),
        ]
    )
    schools = FakeSchoolRepo([school_config])
    attendance_repo = FakeAttendanceRepo()
    requests_repo = FakeEarlyDepartureRepo(attendance_repo)

    attendance_service = AttendanceService(attendance_repo, teachers, schools)
    return SimpleNamespace(
        schools_repo=schools,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        attendance_service=attendance_service,
        early_departure_service=EarlyDepartureService(requests_repo, attendance_service),
        report_service=AttendanceReportService(attendance_repo),
    )


@pytest.fixture
def record_factory():
    return make_record
