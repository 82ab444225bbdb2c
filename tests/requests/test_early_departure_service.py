from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.teacher_attendance.teacher_attendance.core.enums import AttendanceStatus, RequestStatus
from src.teacher_attendance.teacher_attendance.core.exceptions import (
    AlreadyCheckedOut,
    DuplicatePendingRequest,
    MissingRejectionReason,
    NotCheckedInYet,
    RequestAlreadyResolved,
    RequestNotFound,
    ValidationError,
)
from src.teacher_attendance.teacher_attendance.schools.model import SchoolAttendanceConfig

DAY = date(2025, 3, 10)


def at(hour, minute):
    return datetime(DAY.year, DAY.month, DAY.day, hour, minute)


@pytest.fixture
def checked_in(app_services):
    return app_services.attendance_service.check_in(1, now=at(7, 5)).record


def _request(app_services, *, planned=at(13, 30), reason="Child pickup at the clinic", now=at(13, 0)):
    return app_services.early_departure_service.request_early_departure(
        teacher_id=1,
        planned_check_out_time=planned,
        reason=reason,
        now=now,
    )


def test_request_is_created_pending(app_services, checked_in):
    req = _request(app_services)

    assert req.status == RequestStatus.PENDING
    assert req.attendance_id == checked_in.attendance_id
    assert req.school_id == 1
    assert req.planned_check_out_time == at(13, 30)
    assert req.created_at == at(13, 0)
    assert req.reason == "Child pickup at the clinic"


def test_approval_excuses_record_before_checkout(app_services, checked_in):
    req = _request(app_services)

    resolved = app_services.early_departure_service.approve_early_departure(
        request_id=req.request_id,
        approved=True,
        approved_by=500,
        rejection_reason="ignored on approval",
        now=at(13, 10),
    )

    assert resolved.status == RequestStatus.APPROVED
    assert resolved.approved_by == 500
    assert resolved.approved_at == at(13, 10)
    assert resolved.rejection_reason is None

    record = app_services.attendance_repo.get_by_id(checked_in.attendance_id)
    assert record.status == AttendanceStatus.EXCUSED
    assert record.check_out_time is None


def test_second_pending_request_is_rejected(app_services, checked_in):
    _request(app_services)

    with pytest.raises(DuplicatePendingRequest):
        _request(app_services, reason="Another errand in town")

    assert len(app_services.requests_repo.rows) == 1


def test_pending_race_lost_in_repository(app_services, checked_in, monkeypatch):
    monkeypatch.setattr(app_services.requests_repo, "create_pending", lambda **kwargs: None)

    with pytest.raises(DuplicatePendingRequest):
        _request(app_services)


def test_new_request_allowed_after_rejection(app_services, checked_in):
    svc = app_services.early_departure_service
    first = _request(app_services)
    svc.approve_early_departure(
        request_id=first.request_id,
        approved=False,
        approved_by=500,
        rejection_reason="Exams this afternoon",
    )

    second = _request(app_services, reason="Exams moved, leaving after all")

    assert second.request_id != first.request_id
    assert second.is_pending


def test_request_reason_too_short(app_services, checked_in):
    with pytest.raises(ValidationError):
        _request(app_services, reason="sick")


def test_request_without_checkin(app_services):
    with pytest.raises(NotCheckedInYet):
        _request(app_services)


def test_request_after_checkout(app_services, checked_in):
    app_services.attendance_service.check_out(1, now=at(15, 0))

    with pytest.raises(AlreadyCheckedOut):
        _request(app_services, now=at(15, 5))


def test_request_planned_before_checkin(app_services, checked_in):
    with pytest.raises(ValidationError):
        _request(app_services, planned=at(7, 0))


def test_rejection_requires_reason(app_services, checked_in):
    req = _request(app_services)

    with pytest.raises(MissingRejectionReason):
        app_services.early_departure_service.approve_early_departure(
            request_id=req.request_id,
            approved=False,
            approved_by=500,
            rejection_reason="   ",
        )

    assert app_services.requests_repo.get_by_id(request_id=req.request_id).is_pending


def test_rejection_leaves_record_status_unchanged(app_services, checked_in):
    req = _request(app_services)

    resolved = app_services.early_departure_service.approve_early_departure(
        request_id=req.request_id,
        approved=False,
        approved_by=500,
        rejection_reason="Staff meeting at 14:00",
    )

    assert resolved.status == RequestStatus.REJECTED
    assert resolved.rejection_reason == "Staff meeting at 14:00"
    record = app_services.attendance_repo.get_by_id(checked_in.attendance_id)
    assert record.status == AttendanceStatus.PRESENT


def test_request_resolves_only_once(app_services, checked_in):
    svc = app_services.early_departure_service
    req = _request(app_services)
    svc.approve_early_departure(request_id=req.request_id, approved=True, approved_by=500)

    with pytest.raises(RequestAlreadyResolved):
        svc.approve_early_departure(
            request_id=req.request_id,
            approved=False,
            approved_by=501,
            rejection_reason="Changed my mind",
        )


def test_concurrent_resolution_lost_in_repository(app_services, checked_in, monkeypatch):
    req = _request(app_services)
    monkeypatch.setattr(app_services.requests_repo, "resolve", lambda **kwargs: None)

    with pytest.raises(RequestAlreadyResolved):
        app_services.early_departure_service.approve_early_departure(
            request_id=req.request_id, approved=True, approved_by=500
        )


def test_approve_unknown_request(app_services):
    with pytest.raises(RequestNotFound):
        app_services.early_departure_service.approve_early_departure(request_id=42, approved=True, approved_by=500)


def test_list_requests_by_status(app_services, checked_in):
    svc = app_services.early_departure_service
    req = _request(app_services)

    assert [r.request_id for r in svc.list_requests(status=RequestStatus.PENDING)] == [req.request_id]
    assert list(svc.list_requests(status=RequestStatus.APPROVED)) == []


def test_approved_departure_stays_excused_after_checkout(app_services, checked_in):
    req = _request(app_services)
    app_services.early_departure_service.approve_early_departure(
        request_id=req.request_id, approved=True, approved_by=500, now=at(13, 10)
    )

    result = app_services.attendance_service.check_out(1, now=at(13, 30))

    assert result.is_early_departure is True
    assert result.early_minutes == 90
    assert result.record.status == AttendanceStatus.EXCUSED
    assert app_services.attendance_repo.get_by_id(checked_in.attendance_id).status == AttendanceStatus.EXCUSED


def test_decision_time_is_school_local(app_services, checked_in):
    app_services.schools_repo.set(SchoolAttendanceConfig(school_id=1, timezone="Asia/Jakarta"))
    req = _request(app_services)

    resolved = app_services.early_departure_service.approve_early_departure(
        request_id=req.request_id,
        approved=True,
        approved_by=500,
        now=datetime(2025, 3, 10, 6, 10, tzinfo=timezone.utc),
    )

    assert resolved.approved_at == at(13, 10)
