"""HTTP client for the Mistral API.

``MistralClient`` maps each operation onto the retrying transport:

========================  =====================================
chat_completion           ``POST /v1/chat/completions``
chat_completion_stream    ``POST /v1/chat/completions`` (SSE)
embeddings                ``POST /v1/embeddings``
list_models               ``GET /v1/models``
get_model                 ``GET /v1/models/{id}``
========================  =====================================

``new_client`` builds one from configuration and wraps it with the local
filesystem cache when caching is enabled.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .base.cache import LocalFsEngine, new_cached
from .base.cancellation import CancellationToken
from .base.errors import ApiError, DecodeError, ModelNotFoundError
from .base.http import RetryingTransport, TransportResponse, create_httpx_client
from .base.interfaces import Client
from .base.logging import LogContext, get_logger, log_event
from .base.models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    ModelCapabilities,
    ModelCard,
)
from .base.resilience import RetryConfig
from .base.streaming import ChunkStream, iter_chunks
from .config import ClientConfig, load_client_config
from .config.defaults import CHAT_COMPLETIONS_PATH, EMBEDDINGS_PATH, MODELS_PATH

_logger = get_logger("mistral_client.client")


def _json_body(result: TransportResponse) -> Any:
    try:
        return result.json()
    except ValueError as e:
        raise DecodeError(f"failed to unmarshal response body: {e}", raw=e) from e


class MistralClient:
    """Synchronous API client.

    Parameters:
        config: Validated settings; loaded from env/config file when omitted.

    The client owns an ``httpx.Client``; call ``close()`` or use it as a
    context manager.
    """

    def __init__(self, config: Optional[ClientConfig] = None) -> None:
        self.config = config or load_client_config()
        self._http = create_httpx_client(self.config)
        self._transport = RetryingTransport(
            self._http,
            RetryConfig.from_client_config(self.config),
            verbose=self.config.verbose,
        )
        self._limiter = self.config.rate_limiter
        self._level = logging.INFO if self.config.verbose else logging.DEBUG

    def _wait_limiter(self, cancel_token: Optional[CancellationToken]) -> None:
        if self._limiter is not None:
            self._limiter.wait(cancel_token)

    def chat_completion(
        self, request: ChatCompletionRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> ChatCompletionResponse:
        if request is None:
            raise ValueError("request cannot be None")
        if request.stream:
            raise ValueError("chat_completion does not support streaming; use chat_completion_stream")
        self._wait_limiter(cancel_token)
        ctx = LogContext(endpoint=CHAT_COMPLETIONS_PATH, model=request.model)
        result = self._transport.send(
            "POST", CHAT_COMPLETIONS_PATH, request.to_dict(), cancel_token=cancel_token, ctx=ctx
        )
        response = ChatCompletionResponse.from_dict(_json_body(result))
        response.latency = result.latency
        log_event(_logger, "chat.completed", ctx, attempts=result.attempts, level=self._level)
        return response

    def chat_completion_stream(
        self, request: ChatCompletionRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> ChunkStream:
        if request is None:
            raise ValueError("request cannot be None")
        if not request.stream:
            raise ValueError("chat_completion_stream requires streaming; call request.with_streaming()")
        self._wait_limiter(cancel_token)
        ctx = LogContext(endpoint=CHAT_COMPLETIONS_PATH, model=request.model)
        result = self._transport.open_stream(
            CHAT_COMPLETIONS_PATH, request.to_dict(), cancel_token=cancel_token, ctx=ctx
        )
        log_event(
            _logger,
            "stream.open",
            ctx,
            attempts=result.attempts,
            latency_ms=round(result.latency * 1000.0, 3),
            level=self._level,
        )
        return ChunkStream(
            iter_chunks(result.response.iter_lines(), result.latency),
            on_close=result.response.close,
            abort=result.response.close,
            cancel_token=cancel_token,
            ctx=ctx,
        )

    def embeddings(
        self, request: EmbeddingRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> EmbeddingResponse:
        if request is None:
            raise ValueError("request cannot be None")
        self._wait_limiter(cancel_token)
        ctx = LogContext(endpoint=EMBEDDINGS_PATH, model=request.model)
        result = self._transport.send("POST", EMBEDDINGS_PATH, request.to_dict(), cancel_token=cancel_token, ctx=ctx)
        try:
            response = EmbeddingResponse.from_dict(_json_body(result))
        except ValidationError as e:
            raise DecodeError(f"failed to unmarshal response body: {e}", raw=e) from e
        response.latency = result.latency
        return response

    def list_models(self, *, cancel_token: Optional[CancellationToken] = None) -> List[ModelCard]:
        ctx = LogContext(endpoint=MODELS_PATH)
        result = self._transport.send("GET", MODELS_PATH, cancel_token=cancel_token, ctx=ctx)
        body = _json_body(result)
        raw_cards = body.get("data") if isinstance(body, dict) else body
        if not isinstance(raw_cards, list):
            raise DecodeError("failed to unmarshal model list: missing 'data' array")
        return [_decode_card(c) for c in raw_cards]

    def search_models(
        self, capabilities: ModelCapabilities, *, cancel_token: Optional[CancellationToken] = None
    ) -> List[ModelCard]:
        """Models having every capability set in ``capabilities``."""
        return [m for m in self.list_models(cancel_token=cancel_token) if m.matches(capabilities)]

    def get_model(self, model_id: str, *, cancel_token: Optional[CancellationToken] = None) -> ModelCard:
        path = f"{MODELS_PATH}/{model_id}"
        try:
            result = self._transport.send("GET", path, cancel_token=cancel_token, ctx=LogContext(endpoint=path))
        except ApiError as e:
            if e.status_code == 404:
                raise ModelNotFoundError(model_id, e.content) from e
            raise
        return _decode_card(_json_body(result))

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "MistralClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _decode_card(raw: Dict[str, Any]) -> ModelCard:
    try:
        return ModelCard.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"invalid model card: {e}", raw=e) from e


def new_client(config: Optional[ClientConfig] = None, **overrides: Any) -> Client:
    """Build a client from ``config`` (or from env/config file plus ``overrides``).

    When caching is enabled the client is wrapped with a
    :class:`~mistral_client.base.cache.CachedClient` over a
    :class:`~mistral_client.base.cache.LocalFsEngine` rooted at ``cache_dir``.
    """
    cfg = config or load_client_config(overrides)
    client = MistralClient(cfg)
    if cfg.cache_enabled:
        return new_cached(client, LocalFsEngine(cfg.cache_dir))
    return client


__all__ = ["MistralClient", "new_client", "new_cached"]
