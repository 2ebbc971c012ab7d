"""Message union: role dispatch, null vs empty content, tool calls, JSON output."""
from __future__ import annotations

import json

import pytest
from pydantic import BaseModel

from mistral_client.base.errors import DecodeError
from mistral_client.base.models import (
    AssistantMessage,
    SystemMessage,
    TextChunk,
    ThinkChunk,
    ToolCall,
    ToolMessage,
    UserMessage,
    decode_message,
    encode_message,
)


@pytest.mark.parametrize(
    "message",
    [
        SystemMessage("be brief"),
        UserMessage([TextChunk("look"), ThinkChunk([TextChunk("hm")])]),
        UserMessage(""),
        UserMessage(None),
        AssistantMessage("ok"),
        AssistantMessage(None, tool_calls=[ToolCall.new("c1", 0, "lookup", {"q": "x"})]),
        AssistantMessage("partial", prefix=True),
        ToolMessage("42", name="lookup", tool_call_id="c1"),
    ],
)
def test_message_decodes_back_to_itself(message):
    assert decode_message(encode_message(message)) == message  # nosec B101


def test_decode_dispatches_on_role():
    assert isinstance(decode_message({"role": "system", "content": "s"}), SystemMessage)  # nosec B101
    assert isinstance(decode_message({"role": "user", "content": "u"}), UserMessage)  # nosec B101
    assert isinstance(decode_message({"role": "assistant", "content": "a"}), AssistantMessage)  # nosec B101
    tool = decode_message({"role": "tool", "content": "t", "name": "n", "tool_call_id": "id"})
    assert isinstance(tool, ToolMessage)  # nosec B101
    assert (tool.name, tool.tool_call_id) == ("n", "id")  # nosec B101


def test_unknown_role_is_decode_error():
    with pytest.raises(DecodeError):
        decode_message({"role": "narrator", "content": "x"})


def test_null_content_is_distinct_from_empty():
    absent = decode_message('{"role": "assistant"}')
    null = decode_message('{"role": "assistant", "content": null}')
    empty = decode_message('{"role": "assistant", "content": ""}')
    assert absent.content is None  # nosec B101
    assert null.content is None  # nosec B101
    assert empty.content == ""  # nosec B101
    assert json.loads(encode_message(null))["content"] is None  # nosec B101
    assert json.loads(encode_message(empty))["content"] == ""  # nosec B101


def test_assistant_optional_fields_omitted():
    data = AssistantMessage("hi").to_dict()
    assert data == {"role": "assistant", "content": "hi"}  # nosec B101


def test_assistant_tool_call_arguments_as_string_or_object():
    as_string = decode_message(
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                {"id": "a", "index": 0, "type": "function",
                 "function": {"name": "f", "arguments": "{\"city\": \"Paris\"}"}},
            ],
        }
    )
    as_object = decode_message(
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                {"id": "a", "index": 0, "type": "function",
                 "function": {"name": "f", "arguments": {"city": "Paris"}}},
            ],
        }
    )
    assert as_string.tool_calls[0].function.arguments == {"city": "Paris"}  # nosec B101
    assert as_string == as_object  # nosec B101


class _Answer(BaseModel):
    answer: int


def test_output_decodes_json_content():
    msg = AssistantMessage('{"answer": 42}')
    assert msg.output() == {"answer": 42}  # nosec B101
    assert msg.output(_Answer) == _Answer(answer=42)  # nosec B101


@pytest.mark.parametrize("content", [None, "", [TextChunk("{}")]])
def test_output_rejects_empty_content(content):
    with pytest.raises(DecodeError):
        AssistantMessage(content).output()


def test_output_rejects_invalid_json():
    with pytest.raises(DecodeError):
        AssistantMessage("not json").output()
