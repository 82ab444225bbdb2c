from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceReportService
from .requests.mysql_request_repository import MySQLEarlyDepartureRepository
from .requests.service import EarlyDepartureService
from .schools.mysql_school_repository import MySQLSchoolRepository
from .teachers.mysql_teacher_repository import MySQLTeacherRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    teachers_repo: MySQLTeacherRepository
    schools_repo: MySQLSchoolRepository
    attendance_repo: MySQLAttendanceRepository
    requests_repo: MySQLEarlyDepartureRepository

    attendance_service: AttendanceService
    early_departure_service: EarlyDepartureService
    report_service: AttendanceReportService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    teachers_repo = MySQLTeacherRepository(conn)
    schools_repo = MySQLSchoolRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    requests_repo = MySQLEarlyDepartureRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        teachers_repo,
        schools_repo,
        strategy_factory=AttendanceStrategyFactory(),
    )
    early_departure_service = EarlyDepartureService(requests_repo, attendance_service)
    report_service = AttendanceReportService(attendance_repo)

    return Container(
        conn=conn,
        teachers_repo=teachers_repo,
        schools_repo=schools_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        attendance_service=attendance_service,
        early_departure_service=early_departure_service,
        report_service=report_service,
    )
