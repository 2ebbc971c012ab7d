"""
Embedding request/response DTOs for ``POST /v1/embeddings``.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .usage import UsageInfo

EmbeddingVector = List[float]


class EmbeddingEncodingFormat(str, Enum):
    FLOAT = "float"
    BASE64 = "base64"


class EmbeddingOutputDtype(str, Enum):
    FLOAT = "float"
    INT8 = "int8"
    UINT8 = "uint8"
    BINARY = "binary"
    UBINARY = "ubinary"


class EmbeddingRequest(BaseModel):
    """Texts to embed with ``model``; optional fields are omitted when unset."""

    model: str
    input: List[str] = Field(default_factory=list)
    output_dimension: Optional[int] = None
    output_dtype: Optional[EmbeddingOutputDtype] = None
    encoding_format: Optional[EmbeddingEncodingFormat] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmbeddingRequest":
        return cls.model_validate(data)


class EmbeddingData(BaseModel):
    object: str = ""
    embedding: EmbeddingVector = Field(default_factory=list)
    index: int = 0


class EmbeddingResponse(BaseModel):
    """Decoded embeddings. ``latency`` (seconds) is process-local and not serialized."""

    id: str = ""
    object: str = ""
    model: str = ""
    usage: UsageInfo = Field(default_factory=UsageInfo)
    data: List[EmbeddingData] = Field(default_factory=list)
    latency: float = Field(default=0.0, exclude=True)

    def embeddings(self) -> List[EmbeddingVector]:
        """Return the vectors in response order."""
        return [d.embedding for d in self.data]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmbeddingResponse":
        return cls.model_validate(data)


__all__ = [
    "EmbeddingVector",
    "EmbeddingEncodingFormat",
    "EmbeddingOutputDtype",
    "EmbeddingRequest",
    "EmbeddingData",
    "EmbeddingResponse",
]
