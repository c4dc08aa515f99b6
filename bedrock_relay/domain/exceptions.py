from __future__ import annotations

from enum import StrEnum


class RelayErrorKind(StrEnum):
    INTERNAL = "internal"
    INVALID_REQUEST = "invalid_request"
    SERIALIZATION = "serialization"
    PROVIDER_CALL = "provider_call"
    RESPONSE_PARSE = "response_parse"
    EMPTY_CONTENT = "empty_content"


class RelayError(Exception):
    """Raised when a chat request cannot be relayed.

    `message` is the fixed, public text rendered to the caller; the underlying
    cause (if any) is chained via `__cause__` and never rendered.
    """

    kind: RelayErrorKind = RelayErrorKind.INTERNAL
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidChatRequestError(RelayError):
    kind = RelayErrorKind.INVALID_REQUEST
    status_code = 400
    message = "Invalid request"


class RequestSerializationError(RelayError):
    kind = RelayErrorKind.SERIALIZATION
    message = "Failed to marshal request"


class ProviderCallError(RelayError):
    kind = RelayErrorKind.PROVIDER_CALL
    message = "Bedrock API error"


class ResponseParseError(RelayError):
    kind = RelayErrorKind.RESPONSE_PARSE
    message = "Failed to parse Bedrock response"


class EmptyContentError(RelayError):
    """The provider reply decoded but carried no content blocks."""

    kind = RelayErrorKind.EMPTY_CONTENT
    message = "Empty Bedrock response"
