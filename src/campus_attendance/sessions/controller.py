from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import coerce_timestamp
from ..common.http import admin_required, current_role, json_body, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import SessionDraft, TimeWindow


def _window(payload: dict, start_key: str, end_key: str, issues: list[str], *, required: bool):
    raw_start, raw_end = payload.get(start_key), payload.get(end_key)
    if not raw_start and not raw_end and not required:
        return None

    start, end = coerce_timestamp(raw_start), coerce_timestamp(raw_end)
    if start is None:
        issues.append(f"{start_key} must be a valid ISO-8601 timestamp")
    if end is None:
        issues.append(f"{end_key} must be a valid ISO-8601 timestamp")
    if start is None or end is None:
        return None
    return TimeWindow(start=start, end=end)


def draft_from_payload(payload: dict) -> SessionDraft:
    """Build a SessionDraft from the admin form JSON; collects every field issue."""

    issues: list[str] = []
    try:
        event_id = int(payload.get("eventId"))
    except (TypeError, ValueError):
        issues.append("eventId is required")
        event_id = 0

    time_in = _window(payload, "timeInStart", "timeInEnd", issues, required=True)
    time_out = _window(payload, "timeOutStart", "timeOutEnd", issues, required=False)
    if issues:
        raise ValidationError("Invalid session data", details=issues)

    return SessionDraft(
        event_id=event_id,
        name=str(payload.get("name") or ""),
        time_in=time_in,
        time_out=time_out,
        description=payload.get("description"),
        is_active=bool(payload.get("isActive", True)),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/sessions", methods=["POST"], endpoint="sessions_create")
    @admin_required
    def sessions_create():
        payload = json_body()
        draft = draft_from_payload(payload)

        if request.args.get("checkConflicts") == "true":
            result = container.session_service.check_conflicts(draft)
            if result.has_conflict:
                return (
                    jsonify(
                        {
                            "success": False,
                            "error": "Time windows conflict with existing sessions",
                            "conflictingSessions": list(result.conflicting_sessions),
                        }
                    ),
                    409,
                )
            return jsonify({"success": True, "conflictingSessions": []})

        session_id = container.session_service.create(current_role=current_role(), draft=draft)
        return jsonify({"success": True, "session": container.session_service.detail(session_id).to_dict()}), 201

    @app.route("/api/admin/sessions/<int:session_id>", methods=["PUT"], endpoint="sessions_update")
    @admin_required
    def sessions_update(session_id: int):
        payload = json_body()
        container.session_service.update(
            current_role=current_role(),
            session_id=session_id,
            draft=draft_from_payload(payload),
        )
        return jsonify({"success": True, "session": container.session_service.detail(session_id).to_dict()})

    @app.route("/api/admin/sessions/<int:session_id>", methods=["DELETE"], endpoint="sessions_delete")
    @admin_required
    def sessions_delete(session_id: int):
        container.session_service.delete(current_role=current_role(), session_id=session_id)
        return jsonify({"success": True})

    @app.route("/api/organizer/sessions/<int:session_id>", methods=["GET"], endpoint="sessions_detail")
    @login_required
    def sessions_detail(session_id: int):
        return jsonify(container.session_service.detail(session_id).to_dict())
