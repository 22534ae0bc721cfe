"""Tests for the Bedrock runtime wrapper."""

import json

import pytest
from botocore.exceptions import ClientError

from conftest import FakeBedrockRuntime
from nl_explorer.bedrock.client import MOCK_RESPONSE, BedrockClient, BedrockConfig
from nl_explorer.bedrock.translation import parse_tagged_response
from nl_explorer.exceptions.errors import TranslationError


def _cfg(**overrides) -> BedrockConfig:
    base = dict(region="us-east-1", chat_model_id="anthropic.claude-test")
    base.update(overrides)
    return BedrockConfig(**base)


def test_invoke_sends_messages_body_and_returns_text():
    runtime = FakeBedrockRuntime({"content": [{"type": "text", "text": "<query>q</query>"}]})
    client = BedrockClient(_cfg(), runtime=runtime)

    assert client.invoke("hello prompt") == "<query>q</query>"

    assert len(runtime.requests) == 1
    req = runtime.requests[0]
    assert req["modelId"] == "anthropic.claude-test"
    body = json.loads(req["body"].decode("utf-8"))
    assert body["messages"] == [{"role": "user", "content": "hello prompt"}]
    assert body["max_tokens"] == 512
    assert body["temperature"] == 0.0
    assert body["top_k"] == 250
    assert body["top_p"] == 1.0
    assert body["anthropic_version"] == "bedrock-2023-05-31"


def test_invoke_joins_multiple_text_blocks():
    runtime = FakeBedrockRuntime(
        {"content": [{"type": "text", "text": "a"}, {"type": "tool_use"}, {"type": "text", "text": "b"}]}
    )
    assert BedrockClient(_cfg(), runtime=runtime).invoke("p") == "ab"


def test_invoke_falls_back_to_completion_field():
    runtime = FakeBedrockRuntime({"completion": " <query>x</query>"})
    assert BedrockClient(_cfg(), runtime=runtime).invoke("p") == " <query>x</query>"


def test_client_error_becomes_translation_error():
    err = ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "InvokeModel")
    runtime = FakeBedrockRuntime(error=err)
    with pytest.raises(TranslationError) as exc_info:
        BedrockClient(_cfg(), runtime=runtime).invoke("p")
    assert exc_info.value.__cause__ is err
    assert len(runtime.requests) == 1


def test_empty_body_is_translation_error():
    runtime = FakeBedrockRuntime(b"")
    with pytest.raises(TranslationError, match="Empty"):
        BedrockClient(_cfg(), runtime=runtime).invoke("p")


def test_non_json_body_is_translation_error():
    runtime = FakeBedrockRuntime(b"<html>gateway error</html>")
    with pytest.raises(TranslationError):
        BedrockClient(_cfg(), runtime=runtime).invoke("p")


def test_mock_mode_returns_parseable_response_without_runtime():
    client = BedrockClient(_cfg(use_mock=True))
    assert client.br is None
    result = parse_tagged_response(client.invoke("anything"))
    assert client.invoke("anything") == MOCK_RESPONSE
    assert result.query == "SELECT 1 AS mock_value"
