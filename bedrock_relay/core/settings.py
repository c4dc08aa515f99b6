from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        # PORT="" must behave like an unset PORT.
        env_ignore_empty=True,
    )

    app_name: str = "bedrock-chat-relay"
    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "host"),
        description="Interface the HTTP server binds to.",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
        description="TCP port the HTTP server listens on.",
    )

    # Bedrock runtime. Credentials are resolved by the AWS SDK default chain
    # (env vars, shared config files, instance/container roles).
    aws_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("BEDROCK_REGION", "AWS_REGION", "aws_region"),
        description="AWS region hosting the Bedrock runtime endpoint.",
    )
    bedrock_model_id: str = Field(
        default="anthropic.claude-3-haiku-20240307-v1:0",
        validation_alias=AliasChoices("BEDROCK_MODEL_ID", "bedrock_model_id"),
        description="Bedrock model identifier passed to InvokeModel.",
    )
    bedrock_endpoint_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BEDROCK_ENDPOINT_URL", "bedrock_endpoint_url"),
        description="Override for the Bedrock runtime endpoint (proxies/emulators).",
    )
    bedrock_connect_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices(
            "BEDROCK_CONNECT_TIMEOUT_SECONDS", "bedrock_connect_timeout_seconds"
        ),
        description="Socket connect timeout for Bedrock calls (seconds).",
    )
    bedrock_read_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices(
            "BEDROCK_READ_TIMEOUT_SECONDS", "bedrock_read_timeout_seconds"
        ),
        description="Socket read timeout for Bedrock calls (seconds).",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
