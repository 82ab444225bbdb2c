from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_lost_race
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, teacher_id, school_id, work_date,
    check_in_time, check_out_time, expected_check_in_time, expected_check_out_time,
    status, is_late, late_minutes, is_early_departure, early_minutes,
    is_manual_override, manual_reason, override_by, override_at, notes
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        teacher_id=int(r["teacher_id"]),
        school_id=int(r["school_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        expected_check_in_time=r.get("expected_check_in_time"),
        expected_check_out_time=r.get("expected_check_out_time"),
        is_late=bool(r.get("is_late")),
        late_minutes=int(r.get("late_minutes") or 0),
        is_early_departure=bool(r.get("is_early_departure")),
        early_minutes=int(r.get("early_minutes") or 0),
        is_manual_override=bool(r.get("is_manual_override")),
        manual_reason=r.get("manual_reason"),
        override_by=int(r["override_by"]) if r.get("override_by") is not None else None,
        override_at=r.get("override_at"),
        notes=r.get("notes"),
    )


def _filters(
    *,
    teacher_id: Optional[int],
    status: Optional[AttendanceStatus],
    start_date: Optional[date],
    end_date: Optional[date],
) -> tuple[str, list[Any]]:
    clauses = ["1=1"]
    params: list[Any] = []

    if teacher_id is not None:
        clauses.append("teacher_id=%s")
        params.append(int(teacher_id))
    if status is not None:
        clauses.append("status=%s")
        params.append(status.value)
    if start_date is not None:
        clauses.append("work_date>=%s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("work_date<=%s")
        params.append(end_date)

    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_by_id(cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_COLUMNS} FROM teacher_attendance WHERE attendance_id=%s", (int(attendance_id),))
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, attendance_id)

    def get_for_teacher_and_date(self, teacher_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_attendance WHERE teacher_id=%s AND work_date=%s",
                (int(teacher_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock (or gap lock when absent) serializes check-ins for the same day.
            cur.execute(
                """
                SELECT attendance_id, check_in_time, is_manual_override
                FROM teacher_attendance
                WHERE teacher_id=%s AND work_date=%s
                FOR UPDATE
                """,
                (int(teacher_id), work_date),
            )
            existing = fetchone(cur)
            if existing and existing.get("check_in_time") is not None:
                return None

            if existing and existing.get("is_manual_override"):
                # Overridden day: record the arrival, keep status and lateness as set.
                attendance_id = int(existing["attendance_id"])
                cur.execute(
                    """
                    UPDATE teacher_attendance
                    SET check_in_time=%s, expected_check_in_time=%s, expected_check_out_time=%s,
                        notes=COALESCE(%s, notes)
                    WHERE attendance_id=%s
                    """,
                    (check_in_time, expected_check_in_time, expected_check_out_time, notes, attendance_id),
                )
            elif existing:
                attendance_id = int(existing["attendance_id"])
                cur.execute(
                    """
                    UPDATE teacher_attendance
                    SET check_in_time=%s, expected_check_in_time=%s, expected_check_out_time=%s,
                        status=%s, is_late=%s, late_minutes=%s, notes=COALESCE(%s, notes)
                    WHERE attendance_id=%s
                    """,
                    (
                        check_in_time,
                        expected_check_in_time,
                        expected_check_out_time,
                        status.value,
                        int(bool(is_late)),
                        int(late_minutes),
                        notes,
                        attendance_id,
                    ),
                )
            else:
                try:
                    cur.execute(
                        """
                        INSERT INTO teacher_attendance(
                            teacher_id, school_id, work_date, check_in_time,
                            expected_check_in_time, expected_check_out_time,
                            status, is_late, late_minutes, notes
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            int(teacher_id),
                            int(school_id),
                            work_date,
                            check_in_time,
                            expected_check_in_time,
                            expected_check_out_time,
                            status.value,
                            int(bool(is_late)),
                            int(late_minutes),
                            notes,
                        ),
                    )
                except mysql.connector.Error as e:
                    if is_lost_race(e):
                        logger.info("Concurrent check-in for teacher=%s date=%s lost the race", teacher_id, work_date)
                        return None
                    raise
                attendance_id = int(cur.lastrowid)

            return self._select_by_id(cur, attendance_id)

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        is_early_departure: bool,
        early_minutes: int,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_attendance
                SET check_out_time=%s, is_early_departure=%s, early_minutes=%s, notes=COALESCE(%s, notes)
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (check_out_time, int(bool(is_early_departure)), int(early_minutes), notes, int(attendance_id)),
            )
            if cur.rowcount <= 0:
                return None
            return self._select_by_id(cur, attendance_id)

    def apply_override(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reason: str,
        override_by: int,
        override_at: datetime,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_attendance
                SET status=%s, is_manual_override=1, manual_reason=%s, override_by=%s, override_at=%s
                WHERE attendance_id=%s
                """,
                (status.value, reason, int(override_by), override_at, int(attendance_id)),
            )
            # rowcount is 0 when an identical override is reapplied, so re-read instead.
            return self._select_by_id(cur, attendance_id)

    def create_placeholder(
        self,
        *,
        teacher_id: int,
        school_id: int,
        work_date: date,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO teacher_attendance(teacher_id, school_id, work_date, status, notes)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(teacher_id), int(school_id), work_date, status.value, notes),
                )
            except mysql.connector.Error as e:
                if is_lost_race(e):
                    return None
                raise
            return self._select_by_id(cur, int(cur.lastrowid))

    def list_range(
        self,
        *,
        teacher_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = _filters(teacher_id=teacher_id, status=None, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM teacher_attendance
                WHERE {where}
                ORDER BY work_date ASC, teacher_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        where, params = _filters(teacher_id=teacher_id, status=status, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM teacher_attendance WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM teacher_attendance
                WHERE {where}
                ORDER BY work_date DESC, attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)], total
