"""
Client interface shared by the HTTP client and the cache decorator.

Every blocking call accepts an optional ``cancel_token`` observed at each
blocking point (rate-limiter wait, backoff sleep, stream production).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

from .cancellation import CancellationToken
from .models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    ModelCapabilities,
    ModelCard,
)

if TYPE_CHECKING:  # pragma: no cover
    from .streaming import ChunkStream


@runtime_checkable
class Client(Protocol):
    def chat_completion(
        self, request: ChatCompletionRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> ChatCompletionResponse:
        """Run a non-streaming chat completion (``request.stream`` must be False)."""
        ...

    def chat_completion_stream(
        self, request: ChatCompletionRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> "ChunkStream":
        """Run a streaming chat completion (``request.stream`` must be True)."""
        ...

    def embeddings(
        self, request: EmbeddingRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> EmbeddingResponse:
        ...

    def list_models(self, *, cancel_token: Optional[CancellationToken] = None) -> List[ModelCard]:
        ...

    def search_models(
        self, capabilities: ModelCapabilities, *, cancel_token: Optional[CancellationToken] = None
    ) -> List[ModelCard]:
        ...

    def get_model(self, model_id: str, *, cancel_token: Optional[CancellationToken] = None) -> ModelCard:
        """Raises ``ModelNotFoundError`` when the API answers 404."""
        ...

    def close(self) -> None:
        ...


__all__ = ["Client"]
