from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from bedrock_relay.core.llm.bedrock_client import BedrockUpstreamError
from bedrock_relay.core.llm.deps import get_bedrock_client
from bedrock_relay.main import create_app


class _RecordingBedrockClient:
    """Returns a canned reply body and records every InvokeModel call."""

    def __init__(self, reply: bytes | None = None, error: Exception | None = None):
        self.reply = reply if reply is not None else b'{"content": [{"text": "Hello!"}]}'
        self.error = error
        self.calls: list[dict] = []

    async def invoke_model(self, *, model_id: str, content_type: str, body: bytes) -> bytes:
        self.calls.append({"model_id": model_id, "content_type": content_type, "body": body})
        if self.error is not None:
            raise self.error
        return self.reply


@contextmanager
def _client_with(fake: _RecordingBedrockClient) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_bedrock_client] = lambda: fake
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fake_bedrock() -> _RecordingBedrockClient:
    return _RecordingBedrockClient()


@pytest.fixture
def chat_client(fake_bedrock: _RecordingBedrockClient) -> Iterator[TestClient]:
    with _client_with(fake_bedrock) as c:
        yield c


def test_chat_returns_first_content_block_text(
    chat_client: TestClient, fake_bedrock: _RecordingBedrockClient
) -> None:
    fake_bedrock.reply = b'{"content": [{"type": "text", "text": "first"}, {"text": "second"}]}'

    res = chat_client.post("/chat", json={"message": "hi"})

    assert res.status_code == 200, res.text
    assert res.headers["content-type"].startswith("application/json")
    assert res.json() == {"response": "first"}


def test_chat_sends_fixed_template_to_bedrock(
    chat_client: TestClient, fake_bedrock: _RecordingBedrockClient
) -> None:
    res = chat_client.post("/chat", json={"message": "What is 2+2?"})
    assert res.status_code == 200, res.text

    assert len(fake_bedrock.calls) == 1
    call = fake_bedrock.calls[0]
    assert call["model_id"] == "anthropic.claude-3-haiku-20240307-v1:0"
    assert call["content_type"] == "application/json"
    assert json.loads(call["body"]) == {
        "anthropic_version": "bedrock-2023-05-31",
        "messages": [
            {"role": "user", "content": [{"type": "text", "text": "What is 2+2?"}]}
        ],
        "max_tokens": 1024,
        "temperature": 0.7,
        "top_p": 0.9,
    }


def test_chat_uses_configured_model_id(
    monkeypatch: pytest.MonkeyPatch, fake_bedrock: _RecordingBedrockClient
) -> None:
    monkeypatch.setenv("BEDROCK_MODEL_ID", "anthropic.claude-3-sonnet-20240229-v1:0")
    with _client_with(fake_bedrock) as c:
        assert c.post("/chat", json={"message": "hi"}).status_code == 200

    assert fake_bedrock.calls[0]["model_id"] == "anthropic.claude-3-sonnet-20240229-v1:0"


def test_chat_ignores_unknown_fields(
    chat_client: TestClient, fake_bedrock: _RecordingBedrockClient
) -> None:
    res = chat_client.post("/chat", json={"message": "hi", "history": []})
    assert res.status_code == 200
    assert len(fake_bedrock.calls) == 1


@pytest.mark.parametrize(
    "content_type",
    [None, "text/plain", "application/x-www-form-urlencoded", "application/json; charset=utf-8"],
)
def test_chat_decodes_json_body_whatever_the_content_type(
    chat_client: TestClient, fake_bedrock: _RecordingBedrockClient, content_type: str | None
) -> None:
    headers = {"Content-Type": content_type} if content_type else {}

    res = chat_client.post("/chat", content=b'{"message": "hi"}', headers=headers)

    assert res.status_code == 200, res.text
    assert res.json() == {"response": "Hello!"}
    assert json.loads(fake_bedrock.calls[0]["body"])["messages"][0]["content"][0]["text"] == "hi"


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b'{"message": ',
        b"[]",
        b'"hello"',
        b"{}",
        b'{"message": 42}',
        b'{"message": null}',
        b'{"message": "\xff\xfe"}',
        b'{"message": "a\\ud800b"}',
        b"",
    ],
)
def test_chat_invalid_body_returns_400_without_calling_bedrock(
    chat_client: TestClient, fake_bedrock: _RecordingBedrockClient, body: bytes
) -> None:
    res = chat_client.post(
        "/chat", content=body, headers={"Content-Type": "application/json"}
    )

    assert res.status_code == 400
    assert res.text == "Invalid request"
    assert fake_bedrock.calls == []


def test_chat_bedrock_failure_returns_500_and_logs_cause(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="bedrock_relay")
    fake = _RecordingBedrockClient(error=BedrockUpstreamError("InvokeModel failed: ThrottlingException"))

    with _client_with(fake) as c:
        res = c.post("/chat", json={"message": "hi"}, headers={"X-Request-ID": "req_fail_1"})

    assert res.status_code == 500
    assert res.text == "Bedrock API error"
    assert len(fake.calls) == 1

    errors = [
        r for r in caplog.records
        if r.name.startswith("bedrock_relay") and r.levelno >= logging.WARNING
    ]
    assert len(errors) == 1
    record = errors[0]
    assert record.name == "bedrock_relay.chat"
    assert "ThrottlingException" in record.getMessage()
    assert record.__dict__["request_id"] == "req_fail_1"
    assert record.exc_info

    # The failure kind rides on the single access record, not a separate line.
    access = [r for r in caplog.records if r.name == "bedrock_relay.http"]
    assert len(access) == 1
    assert access[0].levelno == logging.INFO
    assert access[0].__dict__["status_code"] == 500
    assert access[0].__dict__["error_kind"] == "provider_call"
    assert access[0].__dict__["request_id"] == "req_fail_1"
    assert [r for r in caplog.records if r.name.startswith("bedrock_relay")] == errors + access


def test_chat_unparseable_reply_returns_500() -> None:
    fake = _RecordingBedrockClient(reply=b"<html>gateway timeout</html>")
    with _client_with(fake) as c:
        res = c.post("/chat", json={"message": "hi"})

    assert res.status_code == 500
    assert res.text == "Failed to parse Bedrock response"


def test_chat_wrongly_typed_content_returns_parse_error() -> None:
    fake = _RecordingBedrockClient(reply=b'{"content": "not a list"}')
    with _client_with(fake) as c:
        res = c.post("/chat", json={"message": "hi"})

    assert res.status_code == 500
    assert res.text == "Failed to parse Bedrock response"


@pytest.mark.parametrize("reply", [b'{"content": []}', b'{"id": "msg_1"}'])
def test_chat_empty_content_returns_500_without_crashing(reply: bytes) -> None:
    fake = _RecordingBedrockClient(reply=reply)
    with _client_with(fake) as c:
        res = c.post("/chat", json={"message": "hi"})
        # The app keeps serving after the out-of-contract reply.
        assert c.get("/health").status_code == 200

    assert res.status_code == 500
    assert res.text == "Empty Bedrock response"


def test_chat_does_not_log_message_or_reply(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    fake = _RecordingBedrockClient(reply=b'{"content": [{"text": "top-secret reply"}]}')

    with _client_with(fake) as c:
        res = c.post("/chat", json={"message": "top-secret question"})

    assert res.status_code == 200
    for record in caplog.records:
        assert "top-secret" not in record.getMessage()


def test_chat_client_error_kind_on_access_record(
    chat_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="bedrock_relay.http")

    res = chat_client.post("/chat", content=b"{}")

    assert res.status_code == 400
    access = [r for r in caplog.records if r.name == "bedrock_relay.http"]
    assert access[-1].__dict__["error_kind"] == "invalid_request"


def test_chat_success_has_no_error_kind(
    chat_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="bedrock_relay.http")

    assert chat_client.post("/chat", json={"message": "hi"}).status_code == 200
    access = [r for r in caplog.records if r.name == "bedrock_relay.http"]
    assert access[-1].__dict__["error_kind"] is None
