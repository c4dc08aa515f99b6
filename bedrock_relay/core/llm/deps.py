from __future__ import annotations

from fastapi import Request

from bedrock_relay.core.llm.bedrock_client import BedrockClient, BedrockConfig
from bedrock_relay.core.settings import Settings


def build_bedrock_client(settings: Settings) -> BedrockClient:
    """Construct the process-wide Bedrock client from settings.

    Raises BedrockConfigError when the SDK client cannot be built.
    """

    config = BedrockConfig(
        region=settings.aws_region,
        connect_timeout_seconds=float(settings.bedrock_connect_timeout_seconds),
        read_timeout_seconds=float(settings.bedrock_read_timeout_seconds),
        endpoint_url=settings.bedrock_endpoint_url,
    )
    return BedrockClient.from_config(config=config)


def get_bedrock_client(request: Request) -> BedrockClient:
    """
    Dependency provider for the shared BedrockClient.

    The client is created once during application startup and stored on
    `app.state`; requests only read it.
    """

    return request.app.state.bedrock_client
