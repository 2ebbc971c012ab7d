"""Persisted cache envelope.

Exactly one payload slot is populated per entry:

* chat request + response,
* embedding request + response,
* chat request + the list of streamed chunks.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..errors import DecodeError
from ..models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionChunk,
    EmbeddingRequest,
    EmbeddingResponse,
)


@dataclass
class CachedData:
    key: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    chat_completion_request: Optional[ChatCompletionRequest] = None
    chat_completion_response: Optional[ChatCompletionResponse] = None
    embedding_request: Optional[EmbeddingRequest] = None
    embedding_response: Optional[EmbeddingResponse] = None
    completion_chunks: Optional[List[CompletionChunk]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"key": self.key, "created_at": self.created_at.isoformat()}
        if self.chat_completion_request is not None:
            out["chat_completion_request"] = self.chat_completion_request.to_dict()
        if self.chat_completion_response is not None:
            out["chat_completion_response"] = self.chat_completion_response.to_dict()
        if self.embedding_request is not None:
            out["embedding_request"] = self.embedding_request.to_dict()
        if self.embedding_response is not None:
            out["embedding_response"] = self.embedding_response.to_dict()
        if self.completion_chunks is not None:
            out["completion_chunks"] = [c.to_dict() for c in self.completion_chunks]
        return out

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedData":
        if not isinstance(data, dict) or "key" not in data:
            raise DecodeError("invalid cache entry: missing key")
        try:
            created_at = datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None
            raw_chunks = data.get("completion_chunks")
            return cls(
                key=str(data["key"]),
                created_at=created_at or datetime.now(timezone.utc),
                chat_completion_request=_opt(ChatCompletionRequest.from_dict, data.get("chat_completion_request")),
                chat_completion_response=_opt(ChatCompletionResponse.from_dict, data.get("chat_completion_response")),
                embedding_request=_opt(EmbeddingRequest.from_dict, data.get("embedding_request")),
                embedding_response=_opt(EmbeddingResponse.from_dict, data.get("embedding_response")),
                completion_chunks=[CompletionChunk.from_dict(c) for c in raw_chunks] if raw_chunks is not None else None,
            )
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            raise DecodeError(f"invalid cache entry: {e}", raw=e) from e

    @classmethod
    def from_bytes(cls, raw: bytes) -> "CachedData":
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"invalid cache entry JSON: {e}", raw=e) from e
        return cls.from_dict(data)


def _opt(decoder, value):
    return decoder(value) if value is not None else None


__all__ = ["CachedData"]
