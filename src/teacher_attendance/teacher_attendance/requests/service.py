from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_min_length
from ..core.constants import MIN_EARLY_DEPARTURE_REASON_LENGTH
from ..core.enums import RequestStatus
from ..core.exceptions import (
    AlreadyCheckedOut,
    DuplicatePendingRequest,
    MissingRejectionReason,
    NotCheckedInYet,
    RequestAlreadyResolved,
    RequestNotFound,
    ValidationError,
)
from .model import EarlyDepartureRequest
from .repository import EarlyDepartureRepository

logger = logging.getLogger(__name__)


class EarlyDepartureService:
    """Request/approve workflow for leaving before the expected check-out time.

    PENDING -> APPROVED | REJECTED, resolved exactly once. Approval marks the
    owning attendance record EXCUSED.
    """

    def __init__(self, requests: EarlyDepartureRepository, attendance: AttendanceService):
        self._requests = requests
        self._attendance = attendance

    def request_early_departure(
        self,
        *,
        teacher_id: int,
        planned_check_out_time: datetime,
        reason: str,
        now: datetime | None = None,
    ) -> EarlyDepartureRequest:
        now = now or now_local()
        reason = require_min_length(reason, "Reason", MIN_EARLY_DEPARTURE_REASON_LENGTH)

        record = self._attendance.get_today_attendance(int(teacher_id), now=now)
        if not record or not record.has_checked_in:
            raise NotCheckedInYet("Not checked in today")
        if record.has_checked_out:
            raise AlreadyCheckedOut("Already checked out today")

        planned = self._attendance.to_school_time(record.school_id, planned_check_out_time)
        if planned < record.check_in_time:
            raise ValidationError("Planned check-out cannot be earlier than check-in")

        # Fast path for a clear error; create_pending re-checks under a row lock.
        if self._requests.get_pending_for_attendance(attendance_id=record.attendance_id):
            raise DuplicatePendingRequest("An early-departure request is already pending")

        created = self._requests.create_pending(
            attendance_id=record.attendance_id,
            school_id=record.school_id,
            planned_check_out_time=planned,
            reason=reason,
            created_at=self._attendance.to_school_time(record.school_id, now),
        )
        if created is None:
            raise DuplicatePendingRequest("An early-departure request is already pending")

        logger.info(
            "Early-departure request=%s attendance=%s planned=%s",
            created.request_id,
            created.attendance_id,
            created.planned_check_out_time,
        )
        return created

    def approve_early_departure(
        self,
        *,
        request_id: int,
        approved: bool,
        approved_by: int,
        rejection_reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> EarlyDepartureRequest:
        req = self._requests.get_by_id(request_id=int(request_id))
        if not req:
            raise RequestNotFound(f"Request {request_id} not found")
        if not req.is_pending:
            raise RequestAlreadyResolved("Request has already been processed")

        rejection_reason = optional_text(rejection_reason)
        if not approved and not rejection_reason:
            raise MissingRejectionReason("A rejection reason is required")

        resolved = self._requests.resolve(
            request_id=req.request_id,
            status=RequestStatus.APPROVED if approved else RequestStatus.REJECTED,
            approved_by=int(approved_by),
            approved_at=self._attendance.to_school_time(req.school_id, now or now_local()),
            rejection_reason=None if approved else rejection_reason,
        )
        if resolved is None:
            raise RequestAlreadyResolved("Request has already been processed")

        logger.info(
            "Early-departure request=%s %s by=%s",
            resolved.request_id,
            resolved.status.value,
            approved_by,
        )
        return resolved

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        school_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EarlyDepartureRequest]:
        if int(limit) < 1:
            raise ValidationError("limit must be >= 1")
        return self._requests.list_requests(
            status=RequestStatus(status) if status else None,
            school_id=school_id,
            limit=int(limit),
        )

    def get_request(self, request_id: int) -> EarlyDepartureRequest:
        req = self._requests.get_by_id(request_id=int(request_id))
        if not req:
            raise RequestNotFound(f"Request {request_id} not found")
        return req
