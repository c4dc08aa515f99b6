from __future__ import annotations

import logging
from typing import Protocol

from pydantic import ValidationError

from bedrock_relay.chat.schemas import InferenceResponse
from bedrock_relay.chat.template import (
    INVOKE_CONTENT_TYPE,
    GenerationParams,
    build_inference_request,
    serialize_inference_request,
)
from bedrock_relay.core.llm.bedrock_client import BedrockError
from bedrock_relay.domain.exceptions import (
    EmptyContentError,
    ProviderCallError,
    RequestSerializationError,
    ResponseParseError,
)

logger = logging.getLogger("bedrock_relay.chat")


class InferenceClient(Protocol):
    async def invoke_model(self, *, model_id: str, content_type: str, body: bytes) -> bytes: ...


def extract_reply_text(response: InferenceResponse) -> str:
    """Return the text of the first content block.

    Raises EmptyContentError when the reply has no content blocks.
    """

    if not response.content:
        raise EmptyContentError()
    return response.content[0].text


class ChatRelayService:
    """Relay one user message to Bedrock and return the model's first text block.

    Each failure is raised as a distinct RelayError subclass; rendering to HTTP
    happens in the exception handlers.
    """

    def __init__(
        self,
        *,
        llm_client: InferenceClient,
        model_id: str,
        params: GenerationParams | None = None,
    ):
        self._llm = llm_client
        self._model_id = model_id
        self._params = params or GenerationParams()

    async def relay(self, *, message: str, request_id: str | None = None) -> str:
        inference_request = build_inference_request(message=message, params=self._params)

        try:
            payload = serialize_inference_request(inference_request)
        except ValueError as exc:
            raise RequestSerializationError() from exc

        try:
            raw = await self._llm.invoke_model(
                model_id=self._model_id,
                content_type=INVOKE_CONTENT_TYPE,
                body=payload,
            )
        except BedrockError as exc:
            logger.error(
                "Bedrock API error: %s",
                exc,
                exc_info=exc,
                extra={"request_id": request_id, "model_id": self._model_id},
            )
            raise ProviderCallError() from exc

        try:
            parsed = InferenceResponse.model_validate_json(raw)
        except ValidationError as exc:
            raise ResponseParseError() from exc

        return extract_reply_text(parsed)
