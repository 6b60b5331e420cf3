"""JSON response helpers and the DomainError -> HTTP status mapping shared by
every controller."""
from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ScanSequenceError,
    ValidationError,
)


def error_response(message: str, status_code: int, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status_code


def status_for(error: DomainError) -> int:
    if isinstance(error, ConflictError):
        return 409
    if isinstance(error, ScanSequenceError):
        return 409 if error.duplicate else 400
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    return 400


def domain_error_response(error: DomainError):
    extra = {}
    if isinstance(error, ConflictError):
        extra["conflictingSessions"] = list(error.conflicting_sessions)
    if isinstance(error, ValidationError) and error.details:
        extra["details"] = list(error.details)
    return error_response(str(error), status_for(error), **extra)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        return domain_error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return error_response(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        app.logger.exception("Unhandled error: %s", error)
        return error_response("An unexpected error occurred", 500)


def json_body() -> dict:
    """The request's JSON object; an absent or unparseable body reads as empty."""

    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def current_role() -> Role:
    return Role(session.get("role", Role.ORGANIZER.value))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "organizer_id" not in session:
            return error_response("Authentication required", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "organizer_id" not in session:
            return error_response("Authentication required", 401)
        if session.get("role") != Role.ADMIN.value:
            return error_response("Admin access required", 403)
        return view(*args, **kwargs)

    return wrapper
