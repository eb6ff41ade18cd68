"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from catalog.core.logger import ensure_request_id
from catalog.services._shared.errors import ErrorKind, ServiceError

log = logging.getLogger(__name__)

# Service error kind -> (HTTP status, stable problem code)
KIND_TO_STATUS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.INTERNAL: (HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
    ErrorKind.NOT_FOUND: (HTTPStatus.NOT_FOUND, "not_found"),
    ErrorKind.ALREADY_EXISTS: (HTTPStatus.CONFLICT, "conflict"),
    ErrorKind.INVALID: (HTTPStatus.BAD_REQUEST, "bad_request"),
    ErrorKind.EXPIRED: (HTTPStatus.UNAUTHORIZED, "token_expired"),
    ErrorKind.INVALID_TOKEN: (HTTPStatus.UNAUTHORIZED, "invalid_token"),
}


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error raised directly by the HTTP layer.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        """Serialize error metadata into an RFC 7807 problem."""
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class Unauthorized(APIError):
    """401 when the bearer credential is missing or unusable."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


def resolve_service_error(err: ServiceError) -> tuple[int, str, str]:
    """
    Return ``(status, code, client_message)`` for a :class:`ServiceError`.

    Internal errors collapse to a generic message; the other kinds surface
    their own message verbatim.
    """
    status, code = KIND_TO_STATUS.get(err.kind, KIND_TO_STATUS[ErrorKind.INTERNAL])
    message = "Unexpected error" if err.kind is ErrorKind.INTERNAL else err.message
    return int(status), code, message


def _respond(
    label: str,
    *,
    status: int,
    code: str,
    message: str,
    log_detail: str | None = None,
    details: dict[str, Any] | None = None,
    exc_info: BaseException | None = None,
) -> tuple[Response, int]:
    """Log one line for the error and build its problem response.

    5xx are logged at ERROR with the traceback, everything else at WARNING.
    ``log_detail`` overrides what is logged; clients only see ``message``.
    """
    problem = _as_problem(status=status, code=code, message=message, details=details)
    if status >= 500:
        log.error(
            "%s: code=%s status=%s detail=%s request_id=%s",
            label,
            code,
            status,
            log_detail or message,
            problem["request_id"],
            exc_info=exc_info,
        )
    else:
        log.warning(
            "%s: code=%s status=%s detail=%s request_id=%s",
            label,
            code,
            status,
            log_detail or message,
            problem["request_id"],
        )
    return _problem_response(problem), status


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Every handled error yields an RFC 7807 body with a ``request_id`` that
    matches the ``X-Request-ID`` response header.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status, code, message = resolve_service_error(err)
        return _respond(
            f"ServiceError[{err.kind.value}]",
            status=status,
            code=code,
            message=message,
            log_detail=err.message,
            exc_info=err,
        )

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _respond(
            "APIError",
            status=err.status_code,
            code=err.code,
            message=err.message,
            details=err.details or None,
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _http_status_to_code(status)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond("HTTPException", status=status, code=code, message=message)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return _respond(
            "ValidationError",
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Raw driver messages stay in the logs
        return _respond(
            "IntegrityError",
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
            log_detail=str(err.orig),
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # Connectivity loss or statement_timeout
        return _respond(
            "OperationalError",
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
            exc_info=err,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return _respond(
            "Unhandled exception",
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
            exc_info=err,
        )
