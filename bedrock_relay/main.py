from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from bedrock_relay.api.exception_handlers import register_exception_handlers
from bedrock_relay.api.schemas import HealthOut
from bedrock_relay.chat.router import router as chat_router
from bedrock_relay.core.llm.bedrock_client import BedrockConfigError
from bedrock_relay.core.llm.deps import build_bedrock_client
from bedrock_relay.core.logging import setup_logging
from bedrock_relay.core.middleware.http_logging import HttpLoggingMiddleware
from bedrock_relay.core.settings import get_settings

setup_logging()

logger = logging.getLogger("bedrock_relay")


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Settings and AWS config are resolved at startup, not import time.
        settings = get_settings()
        try:
            app.state.bedrock_client = build_bedrock_client(settings)
        except BedrockConfigError:
            logger.critical("Unable to load AWS config", exc_info=True)
            raise
        yield

    app = FastAPI(
        title="Bedrock Chat Relay",
        description=(
            "Relays a single user message to a hosted model on Amazon Bedrock and returns "
            "the model's text reply.\n\n"
            "- Stateless: one user turn per call, no history.\n"
            "- Fixed generation parameters (max_tokens, temperature, top_p).\n"
            "- Logs carry request metadata only, never messages or replies."
        ),
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "health",
                "description": "Liveness check; does not call Bedrock.",
            },
            {
                "name": "chat",
                "description": "Single-turn chat relay to Bedrock.",
            },
        ],
    )

    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(chat_router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on the configured host/port."""

    settings = get_settings()
    logger.info("Server listening on :%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
