from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    CapacityExceededError,
    DomainError,
    DuplicateContactError,
    MemberNotFoundError,
    TransientConflictError,
    ValidationError,
)

# Most specific first.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (DuplicateContactError, 409),
    (CapacityExceededError, 409),
    (MemberNotFoundError, 404),
    (TransientConflictError, 503),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def error_body(exc: DomainError) -> dict:
    body = {"error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, DuplicateContactError):
        body["field"] = exc.field
    if isinstance(exc, CapacityExceededError):
        body["group"] = exc.group
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        if status >= 500:
            app.logger.warning("%s: %s", type(exc).__name__, exc)
        return jsonify(error_body(exc)), status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.name, "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        app.logger.exception("Unhandled error")
        if bool(app.config.get("DEBUG", False)):
            return jsonify({"error": "InternalError", "message": str(exc)}), 500
        return jsonify({"error": "InternalError", "message": "Internal server error"}), 500
