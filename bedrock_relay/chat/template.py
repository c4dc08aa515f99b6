from __future__ import annotations

from dataclasses import dataclass

from bedrock_relay.chat.schemas import ConversationTurn, InferenceRequest, TextContentBlock

ANTHROPIC_BEDROCK_VERSION = "bedrock-2023-05-31"
INVOKE_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class GenerationParams:
    """
    Fixed generation settings applied to every relayed message.

    - anthropic_version: protocol tag required by Bedrock for Anthropic models.
    - max_tokens: upper bound on generated tokens.
    - temperature: sampling temperature.
    - top_p: nucleus-sampling threshold (cumulative probability mass).
    - stop_sequences: custom stop strings; None sends none.
    """

    anthropic_version: str = ANTHROPIC_BEDROCK_VERSION
    max_tokens: int = 1024
    temperature: float = 0.7
    top_p: float = 0.9
    stop_sequences: tuple[str, ...] | None = None


def build_inference_request(*, message: str, params: GenerationParams) -> InferenceRequest:
    """Wrap a single user message in the Anthropic Messages request template.

    The conversation always holds exactly one user turn with one text block;
    no system prompt and no history.
    """

    turn = ConversationTurn(role="user", content=(TextContentBlock(text=message),))
    return InferenceRequest(
        anthropic_version=params.anthropic_version,
        messages=(turn,),
        max_tokens=params.max_tokens,
        temperature=params.temperature,
        top_p=params.top_p,
        stop_sequences=params.stop_sequences,
    )


def serialize_inference_request(request: InferenceRequest) -> bytes:
    return request.model_dump_json(exclude_none=True).encode("utf-8")
