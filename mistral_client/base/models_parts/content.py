"""
Polymorphic chat content.

A content value is either a bare string or an ordered list of content chunks.
Every chunk carries a ``type`` discriminator on the wire:

========================  ===========================================
``text``                  :class:`TextChunk`
``image_url``             :class:`ImageUrlChunk`
``document_url``          :class:`DocumentUrlChunk`
``reference``             :class:`ReferenceChunk`
``file``                  :class:`FileChunk`
``thinking``              :class:`ThinkChunk` (nests text/reference only)
``input_audio``           :class:`AudioChunk`
========================  ===========================================

Unrecognized discriminators decode to :class:`UnknownChunk`, which keeps the
raw JSON object and re-encodes it verbatim.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Union

from ..errors import DecodeError


class ContentType(str, Enum):
    """Discriminator values of the content chunk union."""

    TEXT = "text"
    IMAGE_URL = "image_url"
    DOCUMENT_URL = "document_url"
    REFERENCE = "reference"
    FILE = "file"
    THINKING = "thinking"
    AUDIO = "input_audio"


def _require(data: Mapping[str, Any], key: str, kind: type, chunk_type: str) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise DecodeError(f"invalid content: '{chunk_type}' chunk requires a {kind.__name__} '{key}'")
    return value


@dataclass
class TextChunk:
    text: str

    type: ClassVar[ContentType] = ContentType.TEXT

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextChunk":
        return cls(text=_require(data, "text", str, cls.type.value))


@dataclass
class ImageUrlChunk:
    """Image given by URL or ``data:`` URI."""

    image_url: str

    type: ClassVar[ContentType] = ContentType.IMAGE_URL

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "image_url": self.image_url}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageUrlChunk":
        return cls(image_url=_require(data, "image_url", str, cls.type.value))


@dataclass
class DocumentUrlChunk:
    """Document given by URL; ``document_name`` is optional and omitted when unset."""

    document_url: str
    document_name: Optional[str] = None

    type: ClassVar[ContentType] = ContentType.DOCUMENT_URL

    def __post_init__(self) -> None:
        if not self.document_name:
            self.document_name = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type.value}
        if self.document_name is not None:
            out["document_name"] = self.document_name
        out["document_url"] = self.document_url
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentUrlChunk":
        name = data.get("document_name")
        return cls(
            document_url=_require(data, "document_url", str, cls.type.value),
            document_name=name if isinstance(name, str) else None,
        )


@dataclass
class ReferenceChunk:
    """Citation indices into previously supplied documents."""

    reference_ids: List[int] = field(default_factory=list)

    type: ClassVar[ContentType] = ContentType.REFERENCE

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "reference_ids": list(self.reference_ids)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReferenceChunk":
        raw = data.get("reference_ids") or []
        if not isinstance(raw, list):
            raise DecodeError("invalid content: 'reference' chunk requires a list 'reference_ids'")
        try:
            ids = [int(i) for i in raw]
        except (TypeError, ValueError) as e:
            raise DecodeError(f"invalid content: bad reference id: {e}", raw=e) from e
        return cls(reference_ids=ids)


@dataclass
class FileChunk:
    file_id: str

    type: ClassVar[ContentType] = ContentType.FILE

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "file_id": self.file_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileChunk":
        return cls(file_id=_require(data, "file_id", str, cls.type.value))


@dataclass
class AudioChunk:
    """Audio input as a URL, a base64 payload, or an uploaded file reference."""

    input_audio: str

    type: ClassVar[ContentType] = ContentType.AUDIO

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "input_audio": self.input_audio}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AudioChunk":
        return cls(input_audio=_require(data, "input_audio", str, cls.type.value))


ThinkingPart = Union[TextChunk, ReferenceChunk]


@dataclass
class ThinkChunk:
    """Model reasoning trace.

    Only :class:`TextChunk` and :class:`ReferenceChunk` may be nested. The
    restriction is checked at construction: ``None`` raises ``ValueError`` and
    any other chunk kind raises ``TypeError``.
    """

    thinking: List[ThinkingPart] = field(default_factory=list)
    closed: bool = True

    type: ClassVar[ContentType] = ContentType.THINKING

    def __post_init__(self) -> None:
        self.thinking = list(self.thinking)
        for part in self.thinking:
            if part is None:
                raise ValueError("None content cannot be added to a thinking chunk")
            if not isinstance(part, (TextChunk, ReferenceChunk)):
                raise TypeError(
                    "only text and reference content can be added to a thinking chunk, "
                    f"got {type(part).__name__}"
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "closed": self.closed,
            "thinking": [p.to_dict() for p in self.thinking],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThinkChunk":
        raw_parts = data.get("thinking") or []
        if not isinstance(raw_parts, list):
            raise DecodeError("invalid content: 'thinking' chunk requires a list 'thinking'")
        parts: List[ThinkingPart] = []
        for raw in raw_parts:
            if not isinstance(raw, Mapping):
                raise DecodeError("invalid content: thinking element must be an object")
            kind = raw.get("type")
            if kind == ContentType.TEXT.value:
                parts.append(TextChunk.from_dict(raw))
            elif kind == ContentType.REFERENCE.value:
                parts.append(ReferenceChunk.from_dict(raw))
            else:
                raise DecodeError(f"invalid content: '{kind}' is not allowed inside a thinking chunk")
        closed = data.get("closed", True)
        return cls(thinking=parts, closed=bool(closed) if closed is not None else True)


@dataclass
class UnknownChunk:
    """Chunk whose discriminator is not recognized; ``raw`` is kept verbatim."""

    type: str
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UnknownChunk":
        return cls(type=str(data.get("type")), raw=dict(data))


ContentChunk = Union[
    TextChunk,
    ImageUrlChunk,
    DocumentUrlChunk,
    ReferenceChunk,
    FileChunk,
    ThinkChunk,
    AudioChunk,
    UnknownChunk,
]

Content = Union[str, List[ContentChunk]]

_DECODERS: Dict[str, Callable[[Mapping[str, Any]], ContentChunk]] = {
    ContentType.TEXT.value: TextChunk.from_dict,
    ContentType.IMAGE_URL.value: ImageUrlChunk.from_dict,
    ContentType.DOCUMENT_URL.value: DocumentUrlChunk.from_dict,
    ContentType.REFERENCE.value: ReferenceChunk.from_dict,
    ContentType.FILE.value: FileChunk.from_dict,
    ContentType.THINKING.value: ThinkChunk.from_dict,
    ContentType.AUDIO.value: AudioChunk.from_dict,
}


def decode_chunk(data: Any) -> ContentChunk:
    """Decode one chunk object by dispatching on its ``type`` field."""
    if not isinstance(data, Mapping):
        raise DecodeError(f"invalid content: chunk must be an object, got {type(data).__name__}")
    kind = data.get("type")
    if not isinstance(kind, str):
        raise DecodeError("invalid content: chunk is missing its 'type' discriminator")
    decoder = _DECODERS.get(kind)
    if decoder is None:
        return UnknownChunk.from_dict(data)
    return decoder(data)


def decode_content(raw: Any) -> Optional[Content]:
    """Decode a message ``content`` value.

    ``None`` stays ``None`` (absent content is distinct from empty content),
    strings are returned as-is and lists are decoded chunk by chunk.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return [decode_chunk(item) for item in raw]
    raise DecodeError(f"invalid content type: {type(raw).__name__}")


def encode_content(content: Optional[Content]) -> Any:
    """Encode a content value into its JSON-ready form (``None`` stays ``None``)."""
    if content is None or isinstance(content, str):
        return content
    return [chunk.to_dict() for chunk in content]


def content_text(content: Optional[Content]) -> str:
    """Return the bare string form of ``content`` or ``""`` for chunk lists."""
    return content if isinstance(content, str) else ""


__all__ = [
    "ContentType",
    "TextChunk",
    "ImageUrlChunk",
    "DocumentUrlChunk",
    "ReferenceChunk",
    "FileChunk",
    "AudioChunk",
    "ThinkChunk",
    "UnknownChunk",
    "ContentChunk",
    "Content",
    "decode_chunk",
    "decode_content",
    "encode_content",
    "content_text",
]
