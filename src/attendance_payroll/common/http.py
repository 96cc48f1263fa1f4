"""Shared pieces of the JSON controller layer.

Controllers stay thin: they parse input, call one service operation and wrap
the result in the ``{success, message, data}`` envelope.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import PRIVILEGED_ROLES, Role
from ..core.exceptions import (
    AlreadyExistsError,
    AuthorizationError,
    ConcurrentUpdate,
    DomainError,
    InvalidStatusTransition,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def current_employee_id() -> int:
    return int(session["employee_id"])


def current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return fail("Authentication required", 401)
        return view(*args, **kwargs)

    return wrapper


def privileged_required(view):
    """Allow only admin/manager roles (batch payroll, status changes, absence marking)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return fail("Authentication required", 401)
        if current_role() not in PRIVILEGED_ROLES:
            return fail("Access denied", 403)
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def arg_date(name: str, *, required: bool = False, source: Optional[dict] = None):
    raw = (source if source is not None else request.args).get(name)
    if not raw:
        if required:
            raise ValidationError(f"Valid {name} required")
        return None
    return parse_iso_date(str(raw))


def arg_int(name: str, default: Optional[int] = None, *, source: Optional[dict] = None) -> Optional[int]:
    raw = (source if source is not None else request.args).get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {name} required") from None


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), 400)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return fail(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), 404)

    @app.errorhandler(AlreadyExistsError)
    def _exists(e: AlreadyExistsError):
        return fail(str(e), 409)

    @app.errorhandler(InvalidStatusTransition)
    def _transition(e: InvalidStatusTransition):
        return fail(str(e), 409)

    @app.errorhandler(ConcurrentUpdate)
    def _concurrent(e: ConcurrentUpdate):
        return fail(str(e), 409)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), 400)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("[http] unhandled error on %s %s", request.method, request.path)
        return fail("Server error", 500)
