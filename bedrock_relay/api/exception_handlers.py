from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from bedrock_relay.domain.exceptions import InvalidChatRequestError, RelayError


def render_relay_error(request: Request, exc: RelayError) -> PlainTextResponse:
    # The access log middleware reports the kind on its per-request record.
    request.state.error_kind = exc.kind.value
    return PlainTextResponse(content=exc.message, status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> PlainTextResponse:
        # Framework-level validation (path/query) collapses to the same client error.
        return render_relay_error(request, InvalidChatRequestError())

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError) -> PlainTextResponse:
        return render_relay_error(request, exc)
