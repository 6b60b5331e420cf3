from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, to_iso
from ..common.http import admin_required, current_role, json_body
from ..container import Container
from ..core.exceptions import ValidationError
from .model import Event


def _event_to_dict(e: Event) -> dict:
    return {
        "id": e.event_id,
        "name": e.name,
        "description": e.description,
        "startDate": e.start_date.isoformat(),
        "endDate": e.end_date.isoformat(),
        "isActive": e.is_active,
    }


def _date_field(payload: dict, key: str):
    raw = payload.get(key)
    if not raw:
        raise ValidationError(f"{key} is required")
    try:
        return parse_iso_date(str(raw)[:10])
    except ValueError:
        raise ValidationError(f"{key} must be a date (YYYY-MM-DD)")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/events", methods=["GET"], endpoint="events_list")
    @admin_required
    def events_list():
        active_only = request.args.get("active") in {"1", "true"}
        events = container.event_service.list_events(active_only=active_only)
        return jsonify({"events": [_event_to_dict(e) for e in events]})

    @app.route("/api/admin/events", methods=["POST"], endpoint="events_create")
    @admin_required
    def events_create():
        payload = json_body()
        event_id = container.event_service.create(
            current_role=current_role(),
            name=payload.get("name", ""),
            start_date=_date_field(payload, "startDate"),
            end_date=_date_field(payload, "endDate"),
            description=payload.get("description"),
        )
        return jsonify({"success": True, "event": _event_to_dict(container.event_service.get(event_id))}), 201

    @app.route("/api/admin/events/stats", methods=["GET"], endpoint="events_stats")
    @admin_required
    def events_stats():
        return jsonify(container.event_service.stats().to_dict())

    @app.route("/api/admin/events/<int:event_id>", methods=["PATCH"], endpoint="events_set_active")
    @admin_required
    def events_set_active(event_id: int):
        payload = json_body()
        if not isinstance(payload.get("isActive"), bool):
            raise ValidationError("isActive must be true or false")
        container.event_service.set_active(
            current_role=current_role(),
            event_id=event_id,
            is_active=payload["isActive"],
        )
        return jsonify({"success": True, "event": _event_to_dict(container.event_service.get(event_id))})

    @app.route("/api/admin/events/<int:event_id>/sessions", methods=["GET"], endpoint="events_sessions")
    @admin_required
    def events_sessions(event_id: int):
        container.event_service.get(event_id)
        sessions = container.session_service.list_for_event(event_id)
        return jsonify(
            {
                "sessions": [
                    {
                        "id": s.session_id,
                        "name": s.name,
                        "isActive": s.is_active,
                        "timeInStart": to_iso(s.time_in.start),
                        "timeInEnd": to_iso(s.time_in.end),
                        "timeOutStart": to_iso(s.time_out.start) if s.time_out else None,
                        "timeOutEnd": to_iso(s.time_out.end) if s.time_out else None,
                    }
                    for s in sessions
                ]
            }
        )
