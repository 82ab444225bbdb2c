from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_datetime
from ..common.web import (
    json_body,
    json_errors,
    login_required,
    parse_bool,
    parse_int,
    parse_optional_int,
    parse_request_status,
    resolve_teacher_id,
    supervisor_required,
)
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError

API = "/api/teacher-attendance/early-departures"


def register(app: Flask, container: Container) -> None:
    service = container.early_departure_service

    @app.route(API, methods=["POST"], endpoint="early_departure_create")
    @login_required
    @json_errors
    def create_request():
        payload = json_body()
        planned = payload.get("planned_check_out_time")
        if not planned:
            raise ValidationError("planned_check_out_time is required")

        created = service.request_early_departure(
            teacher_id=resolve_teacher_id(payload.get("teacher_id")),
            planned_check_out_time=parse_iso_datetime(planned),
            reason=payload.get("reason") or "",
        )
        return (
            jsonify({"success": True, "message": "Early-departure request submitted", "data": created.to_dict()}),
            201,
        )

    @app.route(API, methods=["GET"], endpoint="early_departure_list")
    @supervisor_required
    @json_errors
    def list_requests():
        status = request.args.get("status")
        school_id = parse_optional_int(request.args.get("school_id"), "school_id")
        if school_id is None:
            school_id = session.get("school_id")

        items = service.list_requests(
            status=parse_request_status(status) if status else None,
            school_id=school_id,
            limit=parse_int(request.args.get("limit", 200), "limit"),
        )
        return jsonify({"success": True, "data": [r.to_dict() for r in items]})

    @app.route(f"{API}/<int:request_id>", methods=["GET"], endpoint="early_departure_detail")
    @supervisor_required
    @json_errors
    def detail(request_id: int):
        return jsonify({"success": True, "data": service.get_request(request_id).to_dict()})

    @app.route(f"{API}/<int:request_id>/decision", methods=["POST"], endpoint="early_departure_decide")
    @supervisor_required
    @json_errors
    def decide(request_id: int):
        payload = json_body()
        if "approved" not in payload:
            raise ValidationError("approved is required")

        resolved = service.approve_early_departure(
            request_id=request_id,
            approved=parse_bool(payload.get("approved"), "approved"),
            approved_by=int(session["user_id"]),
            rejection_reason=payload.get("rejection_reason"),
        )
        message = "Request approved" if resolved.status == RequestStatus.APPROVED else "Request rejected"
        return jsonify({"success": True, "message": message, "data": resolved.to_dict()})
