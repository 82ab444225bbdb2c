from __future__ import annotations

from typing import Optional

from ..core.constants import (
    DEFAULT_CHECK_IN_TIME,
    DEFAULT_CHECK_OUT_TIME,
    DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES,
    DEFAULT_GRACE_PERIOD_MINUTES,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, mysql_time_to_hhmm
from .model import SchoolAttendanceConfig
from .repository import SchoolRepository


class MySQLSchoolRepository(SchoolRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_attendance_config(self, school_id: int) -> Optional[SchoolAttendanceConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT school_id, teacher_check_in_time, teacher_check_out_time,
                       grace_period_minutes, early_departure_threshold_minutes, timezone
                FROM schools
                WHERE school_id=%s
                """,
                (int(school_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

            grace = r.get("grace_period_minutes")
            threshold = r.get("early_departure_threshold_minutes")
            return SchoolAttendanceConfig(
                school_id=int(r["school_id"]),
                teacher_check_in_time=mysql_time_to_hhmm(r.get("teacher_check_in_time")) or DEFAULT_CHECK_IN_TIME,
                teacher_check_out_time=mysql_time_to_hhmm(r.get("teacher_check_out_time")) or DEFAULT_CHECK_OUT_TIME,
                grace_period_minutes=int(grace) if grace is not None else DEFAULT_GRACE_PERIOD_MINUTES,
                early_departure_threshold_minutes=(
                    int(threshold) if threshold is not None else DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES
                ),
                timezone=r.get("timezone") or None,
            )
