"""Render every error leaving a view as ``application/problem+json`` (RFC 7807)."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from profilehub.core.logger import ensure_request_id
from profilehub.services._shared.errors import ServiceError

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Codes for framework-raised HTTP errors (404 routing, 405, 413 upload cap...).
HTTP_ERROR_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Problem Details body.

    ``code`` is the stable machine-readable key clients switch on; ``detail``
    is display text only. ``request_id`` matches the ``X-Request-ID`` header.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem_response(problem: dict[str, Any], status: int) -> tuple[Response, int]:
    resp = jsonify(problem)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, int(status)


def _reply(
    status: int,
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> tuple[Response, int]:
    """Build, log and return one problem. 5xx get a traceback, 4xx a warning."""
    problem = as_problem(status=status, code=code, message=message, details=details)
    fields = {"status": int(status), "code": code, "path": problem["instance"]}
    if status >= 500:
        log.error("request.failed", extra=fields, exc_info=exc)
    else:
        log.warning("request.rejected", extra={**fields, "detail": message})
    return problem_response(problem, status)


def init_app(app: Flask) -> None:
    """Register the handlers. Internal exception text never reaches clients."""

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        # classification comes from the exception type, not its message
        return _reply(int(err.status_code), err.code, err.message, exc=err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = HTTP_ERROR_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return _reply(status, code, message)

    @app.errorhandler(MarshmallowValidationError)
    def handle_payload_error(err: MarshmallowValidationError):
        return _reply(
            HTTPStatus.BAD_REQUEST,
            "validation_error",
            _first_message(err.messages) or "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        return _reply(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_store_down(err: OperationalError):
        return _reply(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "transient_store_error",
            "Storage temporarily unavailable",
            exc=err,
        )

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        return _reply(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error", exc=err)


def _first_message(messages: Any) -> str | None:
    """First string found in marshmallow's nested ``messages``."""
    if isinstance(messages, str):
        return messages
    children = messages.values() if isinstance(messages, dict) else messages if isinstance(messages, list) else ()
    for child in children:
        found = _first_message(child)
        if found:
            return found
    return None
