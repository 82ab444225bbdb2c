from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Session roles handed to us by the identity system."""

    ADMIN = "admin"
    PRINCIPAL = "principal"
    TEACHER = "teacher"


SUPERVISOR_ROLES = frozenset({Role.ADMIN, Role.PRINCIPAL})


class AttendanceStatus(str, Enum):
    """Stored status of a teacher's attendance day."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    SICK = "SICK"
    LEAVE = "LEAVE"
    EXCUSED = "EXCUSED"


# Statuses a supervisor may pre-create a day with (no check-in yet).
ABSENCE_STATUSES = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.SICK, AttendanceStatus.LEAVE})


class RequestStatus(str, Enum):
    """Early-departure approval workflow."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
