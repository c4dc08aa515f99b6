from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError


class BedrockError(Exception):
    """Base error for Bedrock client failures."""


class BedrockConfigError(BedrockError):
    """Raised when the Bedrock runtime client cannot be constructed."""


class BedrockUpstreamError(BedrockError):
    """Raised when an InvokeModel call fails for any reason."""


@dataclass(frozen=True)
class BedrockConfig:
    region: str
    connect_timeout_seconds: float
    read_timeout_seconds: float
    endpoint_url: str | None = None


def create_bedrock_runtime(*, config: BedrockConfig) -> Any:
    """
    Build a boto3 `bedrock-runtime` client.

    Retries are disabled (a single attempt per call); failures surface to the
    caller immediately.
    """

    botocore_config = Config(
        region_name=config.region,
        connect_timeout=config.connect_timeout_seconds,
        read_timeout=config.read_timeout_seconds,
        retries={"mode": "standard", "total_max_attempts": 1},
    )
    try:
        return boto3.client(
            "bedrock-runtime",
            region_name=config.region,
            endpoint_url=config.endpoint_url,
            config=botocore_config,
        )
    except (BotoCoreError, ValueError) as exc:
        raise BedrockConfigError("Unable to load AWS config") from exc


class BedrockClient:
    """
    Thin async wrapper around the blocking `InvokeModel` operation.

    Design notes:
    - No logging in this module (payloads contain user content).
    - The SDK call runs in a worker thread; only the awaiting request waits.
    - Returns the raw response body; parsing belongs to the caller.
    """

    def __init__(self, *, runtime: Any):
        self._runtime = runtime

    @classmethod
    def from_config(cls, *, config: BedrockConfig) -> BedrockClient:
        return cls(runtime=create_bedrock_runtime(config=config))

    async def invoke_model(self, *, model_id: str, content_type: str, body: bytes) -> bytes:
        return await asyncio.to_thread(
            self._invoke_model_sync, model_id=model_id, content_type=content_type, body=body
        )

    def _invoke_model_sync(self, *, model_id: str, content_type: str, body: bytes) -> bytes:
        try:
            out = self._runtime.invoke_model(
                modelId=model_id,
                contentType=content_type,
                body=body,
            )
            # Reading the streaming body can still fail mid-transfer.
            return out["body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            raise BedrockUpstreamError(f"InvokeModel failed: {code}") from exc
        except BotoCoreError as exc:
            raise BedrockUpstreamError("InvokeModel request failed") from exc
