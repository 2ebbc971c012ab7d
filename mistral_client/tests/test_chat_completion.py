"""Chat completion and embedding request/response handling."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List

import httpx
import pytest
from pydantic import BaseModel

from mistral_client import new_client
from mistral_client.base.cache import CachedClient
from mistral_client.base.errors import DecodeError
from mistral_client.base.models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    EmbeddingOutputDtype,
    EmbeddingRequest,
    PropertyDefinition,
    SystemMessage,
    Tool,
    ToolChoiceType,
    UserMessage,
)
from mistral_client.client import MistralClient
from mistral_client.config import ClientConfig

_TOOL_RESPONSE = {
    "id": "cmpl-tools",
    "object": "chat.completion",
    "created": 1717171717,
    "model": "mistral-large-latest",
    "choices": [
        {
            "index": 0,
            "finish_reason": "tool_calls",
            "message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [
                    {
                        "id": "call_1",
                        "type": "function",
                        "function": {"name": "get_weather", "arguments": "{\"city\": \"Paris\"}"},
                    }
                ],
            },
        }
    ],
    "usage": {"prompt_tokens": 20, "completion_tokens": 9, "total_tokens": 29},
}


def _weather_tool() -> Tool:
    return Tool.new(
        "get_weather",
        "Current weather for a city",
        PropertyDefinition.for_object({"city": PropertyDefinition(type="string", description="City")}),
    )


def test_minimal_request_omits_unset_fields():
    body = ChatCompletionRequest("mistral-small-latest", [UserMessage("Hi")]).to_dict()
    assert body == {  # nosec B101
        "model": "mistral-small-latest",
        "messages": [{"role": "user", "content": "Hi"}],
        "parallel_tool_calls": True,
    }


def test_request_helpers_shape_the_body():
    req = (
        ChatCompletionRequest("mistral-large-latest", [SystemMessage("be terse"), UserMessage("Hi")], max_tokens=64)
        .with_tools([_weather_tool()])
        .with_response_json_schema({"type": "object"})
    )
    body = req.to_dict()
    assert body["tool_choice"] == "auto"  # nosec B101
    assert body["max_tokens"] == 64  # nosec B101
    assert body["tools"][0]["function"]["name"] == "get_weather"  # nosec B101
    assert body["response_format"] == {  # nosec B101
        "type": "json_schema",
        "json_schema": {"name": "responseJsonSchema", "schema": {"type": "object"}, "strict": True},
    }
    assert "stream" not in body  # nosec B101

    req.with_tool_choice("ANY").with_response_json_object_format()
    body = req.to_dict()
    assert body["tool_choice"] == "any"  # nosec B101
    assert body["response_format"] == {"type": "json_object"}  # nosec B101


def test_request_survives_serialization():
    req = ChatCompletionRequest("m", [UserMessage("Hi")], temperature=0.7, stop=["\n"]).with_tools([_weather_tool()])
    assert ChatCompletionRequest.from_dict(json.loads(json.dumps(req.to_dict()))) == req  # nosec B101


def test_tool_choice_unknown_value_is_dropped():
    req = ChatCompletionRequest("m").with_tool_choice("sometimes")
    assert req.tool_choice is None  # nosec B101
    assert req.with_tool_choice(ToolChoiceType.NONE).to_dict()["tool_choice"] == "none"  # nosec B101


def test_response_with_tool_calls():
    resp = ChatCompletionResponse.from_dict(_TOOL_RESPONSE)
    assert resp.created == datetime(2024, 5, 31, 16, 8, 37, tzinfo=timezone.utc)  # nosec B101
    msg = resp.assistant_message()
    assert msg.tool_calls[0].function.arguments == {"city": "Paris"}  # nosec B101
    assert resp.choices[0].finish_reason == "tool_calls"  # nosec B101
    assert resp.usage.total_tokens == 29  # nosec B101
    assert resp.to_dict()["created"] == 1717171717  # nosec B101


def test_empty_response_has_no_message():
    assert ChatCompletionResponse.from_dict({"id": "x"}).assistant_message() is None  # nosec B101


def test_bad_created_timestamp():
    with pytest.raises(DecodeError):
        ChatCompletionResponse.from_dict({"created": "yesterday"})


def test_structured_output_through_the_client(make_client):
    class Weather(BaseModel):
        city: str
        celsius: float

    payload = dict(_TOOL_RESPONSE)
    payload["choices"] = [
        {"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": "{\"city\": \"Oslo\", \"celsius\": -3}"}}
    ]
    client = make_client(lambda request: httpx.Response(200, json=payload))
    req = ChatCompletionRequest("m", [UserMessage("weather?")]).with_response_json_object_format()

    weather = client.chat_completion(req).assistant_message().output(Weather)
    assert weather == Weather(city="Oslo", celsius=-3)  # nosec B101


def test_garbage_body_is_a_decode_error(make_client):
    client = make_client(lambda request: httpx.Response(200, text="not json"))
    with pytest.raises(DecodeError):
        client.chat_completion(ChatCompletionRequest("m", [UserMessage("Hi")]))


@pytest.mark.parametrize(
    "body",
    [
        {"id": "x", "choices": [1]},
        {"id": "x", "choices": {"index": 0}},
        {"id": "x", "choices": [{"index": 0, "message": "hi"}]},
        {"id": "x", "choices": [{"index": 0, "finish_reason": ["stop"]}]},
    ],
)
def test_wrong_shape_body_is_a_decode_error(make_client, body):
    client = make_client(lambda request: httpx.Response(200, json=body))
    with pytest.raises(DecodeError, match="invalid"):
        client.chat_completion(ChatCompletionRequest("m", [UserMessage("Hi")]))


def test_embeddings(make_client):
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "id": "emb-1",
                "object": "list",
                "model": "mistral-embed",
                "data": [
                    {"object": "embedding", "embedding": [0.5, 0.25], "index": 0},
                    {"object": "embedding", "embedding": [1.0, 0.0], "index": 1},
                ],
                "usage": {"prompt_tokens": 4, "total_tokens": 4, "completion_tokens": None},
            },
        )

    req = EmbeddingRequest(model="mistral-embed", input=["a", "b"], output_dtype=EmbeddingOutputDtype.FLOAT)
    resp = make_client(handler).embeddings(req)

    assert json.loads(seen[0].content) == {"model": "mistral-embed", "input": ["a", "b"], "output_dtype": "float"}  # nosec B101
    assert seen[0].url.path == "/v1/embeddings"  # nosec B101
    assert resp.embeddings() == [[0.5, 0.25], [1.0, 0.0]]  # nosec B101
    assert resp.usage.completion_tokens == 0  # nosec B101
    assert "latency" not in resp.to_dict()  # nosec B101


def test_malformed_embedding_body(make_client):
    client = make_client(lambda request: httpx.Response(200, json={"data": "nope"}))
    with pytest.raises(DecodeError):
        client.embeddings(EmbeddingRequest(model="mistral-embed", input=["a"]))


def test_new_client_wraps_with_cache(tmp_path):
    calls: List[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(200, json=_TOOL_RESPONSE)

    cfg = ClientConfig(api_key="k", cache_dir=str(tmp_path), transport=httpx.MockTransport(handler))
    client = new_client(cfg)
    try:
        assert isinstance(client, CachedClient)  # nosec B101
        req = ChatCompletionRequest("mistral-large-latest", [UserMessage("weather?")])
        client.chat_completion(req)
        client.chat_completion(req)
    finally:
        client.close()

    assert len(calls) == 1  # nosec B101
    assert len(list(tmp_path.glob("*.json"))) == 1  # nosec B101


def test_new_client_without_cache():
    client = new_client(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    try:
        assert isinstance(client, MistralClient)  # nosec B101
        assert client.config.api_key == "k"  # nosec B101
    finally:
        client.close()
