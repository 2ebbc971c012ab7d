"""
Chat messages.

A tagged union over the ``role`` discriminator. Every message carries a
polymorphic :data:`~.content.Content` value; ``None`` content encodes as JSON
``null`` and stays distinct from the empty string on decode.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..errors import DecodeError
from .content import Content, content_text, decode_content, encode_content
from .tool import ToolCall


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


M = TypeVar("M", bound=BaseModel)


@dataclass
class SystemMessage:
    content: Optional[Content] = None

    role: ClassVar[Role] = Role.SYSTEM

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role.value, "content": encode_content(self.content)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SystemMessage":
        return cls(content=decode_content(data.get("content")))


@dataclass
class UserMessage:
    content: Optional[Content] = None

    role: ClassVar[Role] = Role.USER

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role.value, "content": encode_content(self.content)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserMessage":
        return cls(content=decode_content(data.get("content")))


@dataclass
class AssistantMessage:
    """Assistant turn, also used for streamed deltas.

    Attributes:
        content: Text or chunks produced by the model (``None`` when the turn
            only carries tool calls).
        tool_calls: Tool calls requested by the model, in order.
        prefix: Ask the model to continue this message instead of starting a
            new one.
    """

    content: Optional[Content] = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    prefix: bool = False

    role: ClassVar[Role] = Role.ASSISTANT

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"role": self.role.value, "content": encode_content(self.content)}
        if self.prefix:
            out["prefix"] = True
        if self.tool_calls:
            out["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssistantMessage":
        raw_calls = data.get("tool_calls") or []
        if not isinstance(raw_calls, list):
            raise DecodeError("invalid message: 'tool_calls' must be a list")
        try:
            calls = [ToolCall.model_validate(tc) for tc in raw_calls]
        except ValidationError as e:
            raise DecodeError(f"invalid tool call: {e}", raw=e) from e
        return cls(
            content=decode_content(data.get("content")),
            tool_calls=calls,
            prefix=bool(data.get("prefix", False)),
        )

    def output(self, target: Optional[Type[M]] = None) -> Union[Any, M]:
        """Decode the text content as JSON.

        When ``target`` is a pydantic model class the decoded value is
        validated into it. Raises ``DecodeError`` when the content is empty or
        not valid JSON.
        """
        text = content_text(self.content)
        if not text:
            raise DecodeError("unmarshalling impossible, the message content is empty")
        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"message content is not valid JSON: {e}", raw=e) from e
        if target is None:
            return value
        try:
            return target.model_validate(value)
        except ValidationError as e:
            raise DecodeError(f"message content does not match {target.__name__}: {e}", raw=e) from e


@dataclass
class ToolMessage:
    """Result of a tool call, sent back to the model."""

    content: Optional[Content] = None
    name: str = ""
    tool_call_id: str = ""

    role: ClassVar[Role] = Role.TOOL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": encode_content(self.content),
            "name": self.name,
            "tool_call_id": self.tool_call_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolMessage":
        return cls(
            content=decode_content(data.get("content")),
            name=str(data.get("name") or ""),
            tool_call_id=str(data.get("tool_call_id") or ""),
        )


ChatMessage = Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage]

_DECODERS: Dict[str, Callable[[Mapping[str, Any]], ChatMessage]] = {
    Role.SYSTEM.value: SystemMessage.from_dict,
    Role.USER.value: UserMessage.from_dict,
    Role.ASSISTANT.value: AssistantMessage.from_dict,
    Role.TOOL.value: ToolMessage.from_dict,
}


def decode_message(data: Any) -> ChatMessage:
    """Decode a message object (or its JSON text) by dispatching on ``role``."""
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise DecodeError(f"invalid message JSON: {e}", raw=e) from e
    if not isinstance(data, Mapping):
        raise DecodeError(f"invalid message: expected an object, got {type(data).__name__}")
    role = data.get("role")
    decoder = _DECODERS.get(role) if isinstance(role, str) else None
    if decoder is None:
        raise DecodeError(f"invalid message role: {role!r}")
    return decoder(data)


def encode_message(message: ChatMessage) -> str:
    """Serialize a message to compact JSON text."""
    return json.dumps(message.to_dict(), ensure_ascii=False)


__all__ = [
    "Role",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolMessage",
    "ChatMessage",
    "decode_message",
    "encode_message",
]
