from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyMarked,
    AuthenticationError,
    DomainError,
    NotFound,
    OverlappingSlot,
    SubjectNotFound,
    TransactionConflict,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first.
STATUS_CODES = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (SubjectNotFound, 404),
    (NotFound, 404),
    (AlreadyMarked, 409),
    (OverlappingSlot, 409),
    (TransactionConflict, 503),
)


def ok(data=None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def error_response(exc: DomainError):
    status = next((code for cls, code in STATUS_CODES if isinstance(exc, cls)), 400)
    return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return error_response(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"success": False, "error": type(exc).__name__, "message": exc.description}), exc.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "error": "InternalError", "message": "Internal server error"}), 500
