"""
Chat completion request, response and streaming chunk types.

Wire notes:
    * Request fields are snake_case; zero/empty optional values are omitted.
    * ``created`` is integer epoch seconds on the wire and a UTC ``datetime``
      in memory.
    * ``latency`` / ``chunk_latency`` / ``total_latency`` / ``is_last_chunk``
      / ``error`` are process-local metadata and never serialized.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from pydantic import ValidationError

from ..errors import DecodeError
from .message import AssistantMessage, ChatMessage, decode_message
from .tool import Tool, ToolChoiceType
from .usage import UsageInfo

T = TypeVar("T")

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def epoch_to_datetime(value: Any) -> datetime:
    """Convert integer epoch seconds into an aware UTC ``datetime``."""
    if value is None:
        return _EPOCH
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError) as e:
        raise DecodeError(f"invalid 'created' timestamp: {value!r}", raw=e) from e


def datetime_to_epoch(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _decode_usage(raw: Any) -> UsageInfo:
    if raw is None:
        return UsageInfo()
    try:
        return UsageInfo.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"invalid usage: {e}", raw=e) from e


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    MODEL_LENGTH = "model_length"
    ERROR = "error"
    TOOL_CALLS = "tool_calls"


class ResponseFormatType(str, Enum):
    TEXT = "text"
    JSON_OBJECT = "json_object"
    JSON_SCHEMA = "json_schema"


@dataclass
class JsonSchema:
    name: str
    schema: Any
    description: str = ""
    strict: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.description:
            out["description"] = self.description
        out["schema"] = self.schema
        if self.strict:
            out["strict"] = True
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JsonSchema":
        return cls(
            name=str(data.get("name") or ""),
            schema=data.get("schema"),
            description=str(data.get("description") or ""),
            strict=bool(data.get("strict", False)),
        )


@dataclass
class ResponseFormat:
    type: ResponseFormatType
    json_schema: Optional[JsonSchema] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type.value}
        if self.json_schema is not None:
            out["json_schema"] = self.json_schema.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResponseFormat":
        raw_schema = data.get("json_schema")
        return cls(
            type=ResponseFormatType(data.get("type", ResponseFormatType.TEXT.value)),
            json_schema=JsonSchema.from_dict(raw_schema) if isinstance(raw_schema, Mapping) else None,
        )


@dataclass
class ChatCompletionRequest:
    """Body of ``POST /v1/chat/completions``.

    The ``with_*`` helpers mutate the request and return it so they can be
    chained::

        req = ChatCompletionRequest("mistral-small-latest", msgs).with_streaming()
    """

    model: str
    messages: List[ChatMessage] = field(default_factory=list)
    tools: List[Tool] = field(default_factory=list)
    max_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    response_format: Optional[ResponseFormat] = None
    tool_choice: Optional[ToolChoiceType] = None
    parallel_tool_calls: bool = True
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    n: int = 0
    prompt_mode: str = ""
    random_seed: int = 0
    safe_prompt: bool = False
    stop: List[str] = field(default_factory=list)
    stream: bool = False

    def with_response_text_format(self) -> "ChatCompletionRequest":
        self.response_format = ResponseFormat(ResponseFormatType.TEXT)
        return self

    def with_response_json_object_format(self) -> "ChatCompletionRequest":
        self.response_format = ResponseFormat(ResponseFormatType.JSON_OBJECT)
        return self

    def with_response_json_schema(self, schema: Any) -> "ChatCompletionRequest":
        """Constrain the answer to ``schema`` (a JSON schema mapping, strict mode)."""
        self.response_format = ResponseFormat(
            ResponseFormatType.JSON_SCHEMA,
            JsonSchema(name="responseJsonSchema", schema=schema, strict=True),
        )
        return self

    def with_tools(self, tools: List[Tool]) -> "ChatCompletionRequest":
        """Declare tools and let the model decide when to call them."""
        self.tools = list(tools)
        self.tool_choice = ToolChoiceType.AUTO
        return self

    def with_tool_choice(self, tool_choice: ToolChoiceType | str | None) -> "ChatCompletionRequest":
        if isinstance(tool_choice, str) and not isinstance(tool_choice, ToolChoiceType):
            tool_choice = ToolChoiceType.parse(tool_choice)
        self.tool_choice = tool_choice
        return self

    def with_streaming(self) -> "ChatCompletionRequest":
        self.stream = True
        return self

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.max_tokens:
            out["max_tokens"] = self.max_tokens
        if self.temperature:
            out["temperature"] = self.temperature
        if self.top_p:
            out["top_p"] = self.top_p
        if self.response_format is not None:
            out["response_format"] = self.response_format.to_dict()
        if self.tool_choice:
            out["tool_choice"] = self.tool_choice.value
        if self.parallel_tool_calls:
            out["parallel_tool_calls"] = True
        if self.frequency_penalty:
            out["frequency_penalty"] = self.frequency_penalty
        if self.presence_penalty:
            out["presence_penalty"] = self.presence_penalty
        if self.n:
            out["n"] = self.n
        if self.prompt_mode:
            out["prompt_mode"] = self.prompt_mode
        if self.random_seed:
            out["random_seed"] = self.random_seed
        if self.safe_prompt:
            out["safe_prompt"] = True
        if self.stop:
            out["stop"] = list(self.stop)
        if self.stream:
            out["stream"] = True
        out["model"] = self.model
        out["messages"] = [m.to_dict() for m in self.messages]
        if self.tools:
            out["tools"] = [t.to_dict() for t in self.tools]
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionRequest":
        raw_format = data.get("response_format")
        try:
            tools = [Tool.from_dict(t) for t in data.get("tools") or []]
        except ValidationError as e:
            raise DecodeError(f"invalid tool declaration: {e}", raw=e) from e
        return cls(
            model=str(data.get("model") or ""),
            messages=[decode_message(m) for m in data.get("messages") or []],
            tools=tools,
            max_tokens=int(data.get("max_tokens") or 0),
            temperature=float(data.get("temperature") or 0.0),
            top_p=float(data.get("top_p") or 0.0),
            response_format=ResponseFormat.from_dict(raw_format) if isinstance(raw_format, Mapping) else None,
            tool_choice=ToolChoiceType.parse(data.get("tool_choice")),
            parallel_tool_calls=bool(data.get("parallel_tool_calls", False)),
            frequency_penalty=float(data.get("frequency_penalty") or 0.0),
            presence_penalty=float(data.get("presence_penalty") or 0.0),
            n=int(data.get("n") or 0),
            prompt_mode=str(data.get("prompt_mode") or ""),
            random_seed=int(data.get("random_seed") or 0),
            safe_prompt=bool(data.get("safe_prompt", False)),
            stop=list(data.get("stop") or []),
            stream=bool(data.get("stream", False)),
        )


def _decode_assistant(raw: Any, what: str) -> Optional[AssistantMessage]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise DecodeError(f"invalid {what}: expected an object")
    return AssistantMessage.from_dict(raw)


def _decode_index(raw: Any, what: str) -> int:
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise DecodeError(f"invalid {what} index: {raw!r}")
    return raw


def _decode_finish_reason(raw: Any) -> Optional[str]:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise DecodeError(f"invalid finish_reason: {raw!r}")
    return raw


def _decode_choices(data: Mapping[str, Any], decode: Callable[[Mapping[str, Any]], T], what: str) -> List[T]:
    """Decode the ``choices`` array; every element must be an object."""
    raw = data.get("choices")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DecodeError(f"invalid {what}: 'choices' must be a list")
    out: List[T] = []
    for i, choice in enumerate(raw):
        if not isinstance(choice, Mapping):
            raise DecodeError(f"invalid {what}: choice {i} must be an object")
        out.append(decode(choice))
    return out


@dataclass
class ChatCompletionChoice:
    index: int = 0
    message: Optional[AssistantMessage] = None
    finish_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finish_reason": self.finish_reason,
            "index": self.index,
            "message": self.message.to_dict() if self.message is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionChoice":
        return cls(
            index=_decode_index(data.get("index"), "choice"),
            message=_decode_assistant(data.get("message"), "choice message"),
            finish_reason=_decode_finish_reason(data.get("finish_reason")),
        )


@dataclass
class ChatCompletionResponse:
    """Decoded non-streaming completion. ``latency`` is in seconds (0 on cache hits)."""

    id: str = ""
    model: str = ""
    object: str = ""
    created: datetime = _EPOCH
    choices: List[ChatCompletionChoice] = field(default_factory=list)
    usage: UsageInfo = field(default_factory=UsageInfo)
    latency: float = 0.0

    def assistant_message(self) -> Optional[AssistantMessage]:
        """Return the first choice's message, or ``None`` when absent."""
        if not self.choices:
            return None
        return self.choices[0].message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "choices": [c.to_dict() for c in self.choices],
            "created": datetime_to_epoch(self.created),
            "id": self.id,
            "model": self.model,
            "object": self.object,
            "usage": self.usage.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionResponse":
        if not isinstance(data, Mapping):
            raise DecodeError("invalid chat completion response: expected an object")
        return cls(
            id=str(data.get("id") or ""),
            model=str(data.get("model") or ""),
            object=str(data.get("object") or ""),
            created=epoch_to_datetime(data.get("created")),
            choices=_decode_choices(data, ChatCompletionChoice.from_dict, "chat completion response"),
            usage=_decode_usage(data.get("usage")),
        )


@dataclass
class CompletionResponseStreamChoice:
    index: int = 0
    delta: Optional[AssistantMessage] = None
    finish_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finish_reason": self.finish_reason,
            "index": self.index,
            "delta": self.delta.to_dict() if self.delta is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompletionResponseStreamChoice":
        return cls(
            index=_decode_index(data.get("index"), "stream choice"),
            delta=_decode_assistant(data.get("delta"), "stream delta"),
            finish_reason=_decode_finish_reason(data.get("finish_reason")),
        )


@dataclass
class CompletionChunk:
    """One streamed delta.

    Attributes beyond the wire shape:
        is_last_chunk: The first choice carries a finish reason.
        chunk_latency: Seconds spent reading this chunk since the previous one.
        total_latency: Seconds since the request was issued (terminal chunk only).
        error: Set on the single error-bearing chunk that ends a failed stream.
    """

    id: str = ""
    model: str = ""
    object: str = ""
    created: datetime = _EPOCH
    choices: List[CompletionResponseStreamChoice] = field(default_factory=list)
    usage: Optional[UsageInfo] = None

    is_last_chunk: bool = False
    chunk_latency: float = 0.0
    total_latency: float = 0.0
    error: Optional[BaseException] = None

    def delta_message(self) -> AssistantMessage:
        """Return the first choice's delta, or an empty assistant message."""
        if not self.choices or self.choices[0].delta is None:
            return AssistantMessage()
        return self.choices[0].delta

    def finish_reason(self) -> Optional[str]:
        return self.choices[0].finish_reason if self.choices else None

    @classmethod
    def error_chunk(cls, error: BaseException) -> "CompletionChunk":
        """Synthetic chunk carrying ``error`` and an empty delta."""
        return cls(
            choices=[CompletionResponseStreamChoice(delta=AssistantMessage(content=""))],
            error=error,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "choices": [c.to_dict() for c in self.choices],
            "created": datetime_to_epoch(self.created),
            "id": self.id,
            "model": self.model,
            "object": self.object,
        }
        if self.usage is not None:
            out["usage"] = self.usage.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompletionChunk":
        if not isinstance(data, Mapping):
            raise DecodeError("invalid completion chunk: expected an object")
        raw_usage = data.get("usage")
        chunk = cls(
            id=str(data.get("id") or ""),
            model=str(data.get("model") or ""),
            object=str(data.get("object") or ""),
            created=epoch_to_datetime(data.get("created")),
            choices=_decode_choices(data, CompletionResponseStreamChoice.from_dict, "completion chunk"),
            usage=_decode_usage(raw_usage) if raw_usage is not None else None,
        )
        chunk.is_last_chunk = bool(chunk.finish_reason())
        return chunk


__all__ = [
    "FinishReason",
    "ResponseFormatType",
    "JsonSchema",
    "ResponseFormat",
    "ChatCompletionRequest",
    "ChatCompletionChoice",
    "ChatCompletionResponse",
    "CompletionResponseStreamChoice",
    "CompletionChunk",
    "epoch_to_datetime",
    "datetime_to_epoch",
]
