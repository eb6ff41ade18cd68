"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from catalog.core.errors import Unauthorized
from catalog.core.logger import ensure_request_id
from catalog.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from catalog.repositories.base import Window
from catalog.schemas.common import WindowQuerySchema
from catalog.services._shared.base import ServiceContext

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "Bearer "

_window_schema = WindowQuerySchema()


def parse_window() -> Window:
    """Parse ``limit``/``offset`` from ``request.args`` using Marshmallow."""

    return _window_schema.load(request.args)


def json_body() -> dict[str, Any]:
    """Return the JSON request body, or an empty mapping when absent."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def service_context() -> ServiceContext:
    """Build the request-scoped service context."""

    return ServiceContext(actor=g.get("username"), request_id=ensure_request_id())


def bearer_token() -> str:
    """Extract the bearer credential from the ``Authorization`` header.

    :raises Unauthorized: Header missing or not a bearer credential.
    """

    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        raise Unauthorized("Missing bearer token")
    token = header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Missing bearer token")
    return token


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, unexpired access token.

    Signature or structure failures surface as ``invalid_token`` and an
    expired token as ``token_expired`` (both 401).
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        claims = JWTTokenSigner().parse(bearer_token())
        g.username = claims.username
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
