from __future__ import annotations

from functools import wraps
from typing import Any

import structlog
from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError
from ..core.permissions import Caller
from ..directory.repository import IdentityProvider

log = structlog.get_logger(__name__)


def ok(message: str = "OK", data: Any = None, code: int = 200, **extra):
    payload = {"success": True, "message": message, "data": data}
    payload.update(extra)
    return jsonify(payload), code


def fail(message: str = "Bad Request", code: int = 400, **extra):
    payload = {"success": False, "message": message}
    payload.update(extra)
    return jsonify(payload), code


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Authentication required")
        return view(*args, **kwargs)

    return wrapper


def current_caller(identity: IdentityProvider) -> Caller:
    """Build the caller from the session written by the login module."""

    if "user_id" not in session:
        raise AuthenticationError("Authentication required")
    try:
        user_id = int(session["user_id"])
        role = Role(str(session.get("role", "")).lower())
    except (TypeError, ValueError):
        raise AuthenticationError("Session is not valid")
    return Caller(user_id=user_id, role=role, employee_id=identity.resolve_employee_for_user(user_id))


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        log.warning(
            "request.rejected",
            error=e.code,
            message=str(e),
            method=request.method,
            path=request.path,
        )
        return fail(str(e), e.status_code, error=e.code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500, error=e.name.lower().replace(" ", "_"))

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        log.error("request.failed", method=request.method, path=request.path, exc_info=e)
        return fail("Internal server error", 500, error="internal_error")
