"""Access logging for the relay.

One structured record per request, carrying correlation and outcome metadata:
request id, method, route template, status, duration, and the relay error kind
when a relay step failed. Chat messages and model replies never reach this log.
"""

from __future__ import annotations

import logging
import re
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("bedrock_relay.http")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def request_id_for(request: Request) -> str | None:
    """Correlation id assigned by the middleware, else the caller's header."""

    return getattr(request.state, "request_id", None) or request.headers.get(REQUEST_ID_HEADER)


def _accept_or_mint_request_id(request: Request) -> str:
    # Narrow charset/length keeps caller-supplied ids out of log injection range.
    supplied = request.headers.get(REQUEST_ID_HEADER)
    if supplied and _REQUEST_ID_RE.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex


def _route_template(request: Request) -> str:
    path = getattr(request.scope.get("route"), "path", None)
    return path if isinstance(path, str) and path else "unmatched"


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and emit one access record for it.

    Relay failures are rendered by the exception handlers, which leave the
    failure kind on `request.state.error_kind`; it is folded into the same
    record instead of a separate log line.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _accept_or_mint_request_id(request)
        request.state.request_id = request_id
        started = time.perf_counter()

        def outcome(status_code: int) -> dict[str, object]:
            return {
                "request_id": request_id,
                "http_method": request.method,
                "request_path": _route_template(request),
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
                "error_kind": getattr(request.state, "error_kind", None),
            }

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001 - unexpected exceptions are logged with stack trace
            logger.exception("Unhandled exception while processing request", extra=outcome(500))
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("Request completed", extra=outcome(response.status_code))
        return response
