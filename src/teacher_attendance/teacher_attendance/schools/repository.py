from __future__ import annotations

from typing import Optional, Protocol

from .model import SchoolAttendanceConfig


class SchoolRepository(Protocol):
    def get_attendance_config(self, school_id: int) -> Optional[SchoolAttendanceConfig]:
        raise NotImplementedError
