from __future__ import annotations

from typing import Callable, TypeVar

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import to_iso
from ..common.http import admin_required, json_body, login_required
from ..common.validators import parse_id_list
from ..container import Container
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import AttendanceStatus, Role, ScanType
from ..core.exceptions import AuthorizationError, ValidationError
from .qr import build_qr_payload, decode_qr_image, render_qr_png
from .scan import ScanResult, ScanStatus
from .service import AttendanceQuery

T = TypeVar("T")


def _parse_list(raw: str | None, field_name: str, convert: Callable[[str], T]) -> list[T]:
    out: list[T] = []
    for part in parse_id_list(raw):
        try:
            out.append(convert(part))
        except ValueError:
            raise ValidationError(f"Invalid value for {field_name}: {part}")
    return out


def _int_arg(args, name: str, default: int) -> int:
    raw = args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def parse_attendance_query(args, *, status_alias: bool = False) -> AttendanceQuery:
    """Read list/export filters from the query string.

    The export endpoint also accepts `status` for `statuses`.
    """

    raw_statuses = args.get("statuses")
    if not raw_statuses and status_alias:
        raw_statuses = args.get("status")

    return AttendanceQuery(
        session_ids=_parse_list(args.get("sessions"), "sessions", int),
        statuses=_parse_list(raw_statuses, "statuses", AttendanceStatus.parse),
        q=args.get("q", ""),
        sort=args.get("sort") or "name",
        order=args.get("order") or "asc",
        page=_int_arg(args, "page", 1),
        page_size=_int_arg(args, "pageSize", DEFAULT_PAGE_SIZE),
        program_ids=_parse_list(args.get("programIds"), "programIds", int),
        years=_parse_list(args.get("years"), "years", int),
        scan_types=_parse_list(args.get("scanTypes"), "scanTypes", ScanType),
    ).normalized()


def _scan_result_to_dict(result: ScanResult) -> dict:
    student = result.student
    return {
        "success": True,
        "message": result.message,
        "scanType": result.scan_type.value,
        "timestamp": to_iso(result.timestamp),
        "attendanceRecord": {
            "id": result.record.attendance_id,
            "studentId": result.record.student_id,
            "sessionId": result.record.session_id,
            "eventId": result.record.event_id,
            "timeIn": to_iso(result.record.time_in),
            "timeOut": to_iso(result.record.time_out),
        },
        "student": {
            "id": student.student_id,
            "studentNumber": student.student_number,
            "name": student.full_name,
            "program": student.program_name,
            "year": student.year,
        },
        "session": {"id": result.session.session_id, "name": result.session.name},
    }


def _scan_status_to_dict(status: ScanStatus) -> dict:
    s = status.session
    return {
        "success": True,
        "session": {
            "id": s.session_id,
            "name": s.name,
            "eventName": status.event.name,
            "isActive": s.is_active,
            "timeInStart": to_iso(s.time_in.start),
            "timeInEnd": to_iso(s.time_in.end),
            "timeOutStart": to_iso(s.time_out.start) if s.time_out else None,
            "timeOutEnd": to_iso(s.time_out.end) if s.time_out else None,
            "totalScans": status.total_scans,
        },
        "recentScans": [
            {
                "id": r.attendance_id,
                "studentNumber": r.student_number,
                "studentName": r.student_name,
                "scanType": r.scan_type.value,
                "timestamp": to_iso(r.timestamp),
            }
            for r in status.recent_scans
        ],
    }


def _acting_organizer(requested) -> int:
    """Organizer id for a scan; only admins may act for someone else."""

    own_id = int(session["organizer_id"])
    if requested in (None, ""):
        return own_id
    try:
        organizer_id = int(requested)
    except (TypeError, ValueError):
        raise ValidationError("organizerId must be an integer")
    if organizer_id != own_id and session.get("role") != Role.ADMIN.value:
        raise AuthorizationError("You cannot scan on behalf of another organizer")
    return organizer_id


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scanning/process", methods=["POST"], endpoint="scan_process")
    @login_required
    def scan_process():
        payload = json_body()
        try:
            session_id = int(payload.get("sessionId"))
        except (TypeError, ValueError):
            raise ValidationError("Invalid scan request", details=["sessionId is required"])

        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValidationError("Invalid scan request", details=["metadata must be an object"])
        forwarded = request.headers.get("X-Forwarded-For", "")
        result = container.scan_service.process_scan(
            qr_data=payload.get("qrData", ""),
            session_id=session_id,
            organizer_id=_acting_organizer(payload.get("organizerId")),
            ip_address=forwarded.split(",")[0].strip() or request.remote_addr,
            user_agent=metadata.get("userAgent") or request.headers.get("User-Agent"),
        )
        return jsonify(_scan_result_to_dict(result))

    @app.route("/api/scanning/process", methods=["GET"], endpoint="scan_status")
    @login_required
    def scan_status():
        session_id = _int_arg(request.args, "sessionId", 0)
        if not session_id:
            raise ValidationError("sessionId is required")
        status = container.scan_service.scan_status(
            session_id=session_id,
            organizer_id=_acting_organizer(request.args.get("organizerId")),
        )
        return jsonify(_scan_status_to_dict(status))

    @app.route("/api/scanning/decode", methods=["POST"], endpoint="scan_decode")
    @login_required
    def scan_decode():
        upload = request.files.get("image")
        if upload is None:
            raise ValidationError("image file is required")
        return jsonify({"success": True, "qrData": decode_qr_image(upload.read())})

    @app.route("/api/students/<int:student_id>/qr.png", methods=["GET"], endpoint="student_qr")
    @admin_required
    def student_qr(student_id: int):
        container.scan_service.get_student(student_id)
        png = render_qr_png(build_qr_payload(student_id))
        return app.response_class(png, mimetype="image/png")

    @app.route("/api/admin/events/<int:event_id>/attendance", methods=["GET"], endpoint="event_attendance")
    @admin_required
    def event_attendance(event_id: int):
        query = parse_attendance_query(request.args)
        return jsonify(container.attendance_service.list_for_event(event_id, query).to_dict())

    @app.route("/api/admin/events/<int:event_id>/attendance/export", methods=["GET"], endpoint="event_attendance_export")
    @admin_required
    def event_attendance_export(event_id: int):
        query = parse_attendance_query(request.args, status_alias=True)
        export = container.export_service.build_export(event_id, query, request.args.get("format", "csv"))
        return app.response_class(
            export.content,
            mimetype=export.mimetype,
            headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
        )
