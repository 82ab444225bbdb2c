from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import EarlyDepartureRequest


class EarlyDepartureRepository(Protocol):
    def get_by_id(self, *, request_id: int) -> Optional[EarlyDepartureRequest]:
        raise NotImplementedError

    def get_pending_for_attendance(self, *, attendance_id: int) -> Optional[EarlyDepartureRequest]:
        raise NotImplementedError

    def create_pending(
        self,
        *,
        attendance_id: int,
        school_id: int,
        planned_check_out_time: datetime,
        reason: str,
        created_at: datetime,
    ) -> Optional[EarlyDepartureRequest]:
        """Insert a PENDING request unless one is already pending for the record.

        The pending check and the insert share one transaction with the owning
        attendance row locked. Returns None when a pending request exists.
        """

        raise NotImplementedError

    def resolve(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approved_by: int,
        approved_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> Optional[EarlyDepartureRequest]:
        """Move a PENDING request to APPROVED/REJECTED.

        On APPROVED the owning attendance record becomes EXCUSED in the same
        transaction. Returns None when the request is no longer PENDING.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        school_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EarlyDepartureRequest]:
        """Newest first."""

        raise NotImplementedError
