from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from bedrock_relay.chat.schemas import ChatRequest, ChatResponse
from bedrock_relay.chat.service import ChatRelayService, InferenceClient
from bedrock_relay.core.llm.deps import get_bedrock_client
from bedrock_relay.core.middleware.http_logging import request_id_for
from bedrock_relay.core.settings import get_settings
from bedrock_relay.domain.exceptions import InvalidChatRequestError

router = APIRouter(tags=["chat"])


async def decode_chat_request(request: Request) -> ChatRequest:
    """Decode the raw body as a ChatRequest regardless of its Content-Type.

    Invalid UTF-8, malformed JSON, lone surrogate escapes and shape mismatches
    all become InvalidChatRequestError.
    """

    body = await request.body()
    try:
        return ChatRequest.model_validate_json(body)
    except ValidationError as exc:
        raise InvalidChatRequestError() from exc


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Relay a message to the model",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ChatRequest.model_json_schema()}},
        }
    },
    responses={
        400: {"description": "Body is not a JSON object with a string `message`."},
        500: {"description": "Bedrock call or response handling failed."},
    },
)
async def chat(
    request: Request,
    payload: ChatRequest = Depends(decode_chat_request),
    bedrock_client: InferenceClient = Depends(get_bedrock_client),
) -> ChatResponse:
    """
    Forward a single user message to Bedrock and return the first text block
    of the reply.

    Stateless: no conversation history is kept between calls.
    """

    svc = ChatRelayService(llm_client=bedrock_client, model_id=get_settings().bedrock_model_id)
    text = await svc.relay(message=payload.message, request_id=request_id_for(request))
    return ChatResponse(response=text)
