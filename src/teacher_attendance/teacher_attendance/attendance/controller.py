from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request, session

from ..common.web import (
    is_supervisor,
    json_body,
    json_errors,
    login_required,
    parse_attendance_status,
    parse_int,
    parse_optional_date,
    parse_optional_int,
    resolve_teacher_id,
    supervisor_required,
)
from ..container import Container
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.exceptions import AuthorizationError
from ..reports.model import MonthlyReport

API = "/api/teacher-attendance"

_CSV_FIELDS = [
    "date",
    "status",
    "check_in_time",
    "check_out_time",
    "is_late",
    "late_minutes",
    "is_early_departure",
    "early_minutes",
    "notes",
]


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    reports = container.report_service

    def _monthly_report() -> MonthlyReport:
        teacher_id = resolve_teacher_id(request.args.get("teacher_id"))
        today = service.school_today(teacher_id)
        return reports.monthly_report(
            teacher_id=teacher_id,
            month=parse_int(request.args.get("month", today.month), "month"),
            year=parse_int(request.args.get("year", today.year), "year"),
        )

    def _write_report_csv(*, report: MonthlyReport, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_CSV_FIELDS)
        writer.writeheader()
        for detail in report.daily_details:
            writer.writerow(detail.to_dict())

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route(f"{API}/check-in", methods=["POST"], endpoint="teacher_check_in")
    @login_required
    @json_errors
    def check_in():
        payload = json_body()
        result = service.check_in(resolve_teacher_id(payload.get("teacher_id")), notes=payload.get("notes"))
        message = f"Checked in {result.late_minutes} minutes late" if result.is_late else "Checked in on time"
        return (
            jsonify(
                {
                    "success": True,
                    "message": message,
                    "data": result.record.to_dict(),
                    "is_late": result.is_late,
                    "late_minutes": result.late_minutes,
                    "expected_check_out": result.expected_check_out,
                }
            ),
            201,
        )

    @app.route(f"{API}/check-out", methods=["POST"], endpoint="teacher_check_out")
    @login_required
    @json_errors
    def check_out():
        payload = json_body()
        result = service.check_out(resolve_teacher_id(payload.get("teacher_id")), notes=payload.get("notes"))
        message = (
            f"Checked out {result.early_minutes} minutes early" if result.is_early_departure else "Checked out"
        )
        return jsonify(
            {
                "success": True,
                "message": message,
                "data": result.record.to_dict(),
                "is_early_departure": result.is_early_departure,
                "early_minutes": result.early_minutes,
            }
        )

    @app.route(f"{API}/today", methods=["GET"], endpoint="teacher_attendance_today")
    @login_required
    @json_errors
    def today():
        record = service.get_today_attendance(resolve_teacher_id(request.args.get("teacher_id")))
        return jsonify({"success": True, "data": record.to_dict() if record else None})

    @app.route(API, methods=["GET"], endpoint="teacher_attendance_list")
    @supervisor_required
    @json_errors
    def list_records():
        status = request.args.get("status")
        page = service.list_records(
            page=parse_int(request.args.get("page", 1), "page"),
            limit=parse_int(request.args.get("limit", DEFAULT_PAGE_LIMIT), "limit"),
            teacher_id=parse_optional_int(request.args.get("teacher_id"), "teacher_id"),
            status=parse_attendance_status(status) if status else None,
            date_from=parse_optional_date(request.args.get("date_from")),
            date_to=parse_optional_date(request.args.get("date_to")),
        )
        return jsonify(
            {
                "success": True,
                "data": [r.to_dict() for r in page.items],
                "pagination": {
                    "page": page.page,
                    "limit": page.limit,
                    "total": page.total,
                    "total_pages": page.total_pages,
                },
            }
        )

    @app.route(f"{API}/<int:attendance_id>", methods=["GET"], endpoint="teacher_attendance_detail")
    @login_required
    @json_errors
    def detail(attendance_id: int):
        record = service.get_record(attendance_id)
        if not is_supervisor() and record.teacher_id != resolve_teacher_id(None):
            raise AuthorizationError("You can only view your own attendance")
        return jsonify({"success": True, "data": record.to_dict()})

    @app.route(f"{API}/<int:attendance_id>/override", methods=["POST"], endpoint="teacher_attendance_override")
    @supervisor_required
    @json_errors
    def override(attendance_id: int):
        payload = json_body()
        record = service.manual_override(
            attendance_id=attendance_id,
            status=parse_attendance_status(payload.get("status")),
            reason=payload.get("reason") or "",
            overridden_by=int(session["user_id"]),
        )
        return jsonify({"success": True, "message": "Attendance updated", "data": record.to_dict()})

    @app.route(f"{API}/absences", methods=["POST"], endpoint="teacher_attendance_absence")
    @supervisor_required
    @json_errors
    def record_absence():
        payload = json_body()
        record = service.record_absence(
            teacher_id=parse_int(payload.get("teacher_id"), "teacher_id"),
            work_date=parse_optional_date(payload.get("date")),
            status=parse_attendance_status(payload.get("status")),
            notes=payload.get("notes"),
        )
        return jsonify({"success": True, "message": "Absence recorded", "data": record.to_dict()}), 201

    @app.route(f"{API}/stats", methods=["GET"], endpoint="teacher_attendance_stats")
    @login_required
    @json_errors
    def stats():
        teacher_id = request.args.get("teacher_id")
        if is_supervisor():
            teacher_id = parse_optional_int(teacher_id, "teacher_id")
        else:
            teacher_id = resolve_teacher_id(teacher_id)

        result = reports.get_stats(
            teacher_id=teacher_id,
            date_from=parse_optional_date(request.args.get("date_from")),
            date_to=parse_optional_date(request.args.get("date_to")),
        )
        return jsonify({"success": True, "data": result.to_dict()})

    @app.route(f"{API}/monthly-report", methods=["GET"], endpoint="teacher_monthly_report")
    @login_required
    @json_errors
    def monthly_report():
        return jsonify({"success": True, "data": _monthly_report().to_dict()})

    @app.route(f"{API}/monthly-report.csv", methods=["GET"], endpoint="teacher_monthly_report_csv")
    @login_required
    @json_errors
    def monthly_report_csv():
        report = _monthly_report()
        filename = f"teacher_{report.teacher_id}_attendance_{report.year}{report.month:02d}.csv"
        return _write_report_csv(report=report, filename=filename)
