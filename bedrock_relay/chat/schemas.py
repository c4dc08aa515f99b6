from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatRequest(BaseModel):
    message: str = Field(
        description="User message forwarded verbatim to the model.",
        examples=["What is the capital of Japan?"],
    )

    @field_validator("message")
    @classmethod
    def _encodable_as_utf8(cls, value: str) -> str:
        # Lone surrogates decode from JSON escapes but cannot be re-encoded for Bedrock.
        value.encode("utf-8")
        return value


class ChatResponse(BaseModel):
    response: str = Field(
        description="Text of the first content block of the model reply.",
        examples=["The capital of Japan is Tokyo."],
    )


# Anthropic Messages wire format as accepted by Bedrock InvokeModel.


class TextContentBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: tuple[TextContentBlock, ...]


class InferenceRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    anthropic_version: str
    messages: tuple[ConversationTurn, ...]
    max_tokens: int = Field(ge=1)
    temperature: float = Field(ge=0.0, le=1.0)
    top_p: float = Field(ge=0.0, le=1.0)
    # Omitted from the wire form when None.
    stop_sequences: tuple[str, ...] | None = None


class ResponseContentBlock(BaseModel):
    """A single reply block; only `text` is read, other fields are ignored."""

    text: str = ""


class InferenceResponse(BaseModel):
    content: list[ResponseContentBlock] = Field(default_factory=list)
