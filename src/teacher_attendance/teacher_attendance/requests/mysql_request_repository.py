from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import EarlyDepartureRequest
from .repository import EarlyDepartureRepository

_COLUMNS = """
    request_id, attendance_id, school_id, planned_check_out_time, reason,
    status, created_at, approved_by, approved_at, rejection_reason
"""


def _to_request(r: dict) -> EarlyDepartureRequest:
    return EarlyDepartureRequest(
        request_id=int(r["request_id"]),
        attendance_id=int(r["attendance_id"]),
        school_id=int(r["school_id"]),
        planned_check_out_time=r["planned_check_out_time"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLEarlyDepartureRepository(EarlyDepartureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_by_id(cur, request_id: int) -> Optional[EarlyDepartureRequest]:
        cur.execute(f"SELECT {_COLUMNS} FROM early_departure_requests WHERE request_id=%s", (int(request_id),))
        r = fetchone(cur)
        return _to_request(r) if r else None

    def get_by_id(self, *, request_id: int) -> Optional[EarlyDepartureRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, request_id)

    def get_pending_for_attendance(self, *, attendance_id: int) -> Optional[EarlyDepartureRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM early_departure_requests
                WHERE attendance_id=%s AND status=%s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (int(attendance_id), RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create_pending(
        self,
        *,
        attendance_id: int,
        school_id: int,
        planned_check_out_time: datetime,
        reason: str,
        created_at: datetime,
    ) -> Optional[EarlyDepartureRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Locking the parent row makes check-then-insert safe across concurrent requests.
            cur.execute(
                "SELECT attendance_id FROM teacher_attendance WHERE attendance_id=%s FOR UPDATE",
                (int(attendance_id),),
            )
            cur.fetchall()
            cur.execute(
                "SELECT COUNT(*) AS pending FROM early_departure_requests WHERE attendance_id=%s AND status=%s",
                (int(attendance_id), RequestStatus.PENDING.value),
            )
            if int((fetchone(cur) or {}).get("pending") or 0) > 0:
                return None

            cur.execute(
                """
                INSERT INTO early_departure_requests(
                    attendance_id, school_id, planned_check_out_time, reason, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(attendance_id),
                    int(school_id),
                    planned_check_out_time,
                    reason,
                    RequestStatus.PENDING.value,
                    created_at,
                ),
            )
            return self._select_by_id(cur, int(cur.lastrowid))

    def resolve(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approved_by: int,
        approved_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> Optional[EarlyDepartureRequest]:
        # Both updates share this block's single commit.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE early_departure_requests
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(approved_by),
                    approved_at,
                    rejection_reason,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            if cur.rowcount <= 0:
                return None

            resolved = self._select_by_id(cur, request_id)
            if status == RequestStatus.APPROVED:
                cur.execute(
                    "UPDATE teacher_attendance SET status=%s WHERE attendance_id=%s",
                    (AttendanceStatus.EXCUSED.value, resolved.attendance_id),
                )
            return resolved

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        school_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EarlyDepartureRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if school_id is not None:
            clauses.append("school_id=%s")
            params.append(int(school_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM early_departure_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]
