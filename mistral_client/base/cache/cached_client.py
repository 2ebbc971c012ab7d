"""Content-addressed response cache wrapped around any :class:`Client`.

Every cacheable call goes through :func:`cached_call`, parameterized by the
request fingerprint, the call-through closure and an encode/decode codec:

* hit: decode the stored envelope and return only the relevant payload;
* miss (:class:`CacheMiss`): call through, persist the envelope, return the
  result;
* any other store error: raise :class:`CacheFailureError` without calling
  through.

A failed write after a successful upstream call raises
:class:`CacheFailureError` carrying the upstream result on ``response``.

Streams are relayed chunk by chunk while being buffered, and persisted once
the source is exhausted. A failed write appends one synthetic error chunk
after the genuine ones. Streams that carried an error chunk are not stored.
Model listing calls pass through uncached.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional, TypeVar

from ..cancellation import CancellationToken
from ..errors import CacheFailureError, DecodeError
from ..interfaces import Client
from ..logging import LogContext, get_logger, log_event
from ..models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionChunk,
    EmbeddingRequest,
    EmbeddingResponse,
    ModelCapabilities,
    ModelCard,
)
from ..streaming import ChunkStream
from .cached_data import CachedData
from .engine import CacheEngine, CacheMiss
from .keys import compute_hash_key

T = TypeVar("T")

_logger = get_logger("mistral_client.cache")


def _read(engine: CacheEngine, key: str, ctx: LogContext) -> Optional[bytes]:
    """Return the stored bytes, or ``None`` on a miss."""
    try:
        raw = engine.get(key)
    except CacheMiss:
        log_event(_logger, "cache.miss", ctx, key=key, level=logging.DEBUG)
        return None
    except Exception as e:  # any store failure other than a miss is fatal for the call
        log_event(_logger, "cache.error", ctx, key=key, op="get", error=str(e), level=logging.WARNING)
        raise CacheFailureError("cache read failed", e) from e
    log_event(_logger, "cache.hit", ctx, key=key, level=logging.DEBUG)
    return raw


def _write(engine: CacheEngine, key: str, envelope: CachedData, ctx: LogContext, response: object) -> None:
    try:
        payload = envelope.to_bytes()
    except (TypeError, ValueError) as e:
        log_event(_logger, "cache.error", ctx, key=key, op="encode", error=str(e), level=logging.WARNING)
        raise CacheFailureError("cache entry encoding failed", e, response=response) from e
    try:
        engine.set(key, payload)
    except Exception as e:  # surfaced with the upstream payload attached
        log_event(_logger, "cache.error", ctx, key=key, op="set", error=str(e), level=logging.WARNING)
        raise CacheFailureError("cache write failed", e, response=response) from e
    log_event(_logger, "cache.store", ctx, key=key, bytes=len(payload), level=logging.DEBUG)


def _decode(raw: bytes, extract: Callable[[CachedData], Optional[T]], what: str) -> T:
    try:
        data = CachedData.from_bytes(raw)
    except DecodeError as e:
        raise CacheFailureError("cache entry decoding failed", e) from e
    value = extract(data)
    if value is None:
        raise CacheFailureError(f"cache entry holds no {what}")
    return value


def cached_call(
    engine: CacheEngine,
    key: str,
    call: Callable[[], T],
    envelope: Callable[[T], CachedData],
    extract: Callable[[CachedData], Optional[T]],
    *,
    what: str,
    ctx: Optional[LogContext] = None,
) -> T:
    """Generic cache lookup: hit, or call through and persist.

    Parameters:
        engine: Byte store.
        key: Request fingerprint.
        call: Call-through closure invoked on a miss.
        envelope: Builds the persisted envelope from the call result.
        extract: Picks the payload out of a decoded envelope.
        what: Payload name used in error messages.
    """
    ctx = ctx or LogContext()
    raw = _read(engine, key, ctx)
    if raw is not None:
        return _decode(raw, extract, what)
    result = call()
    _write(engine, key, envelope(result), ctx, result)
    return result


class CachedClient:
    """Cache decorator over ``client`` backed by ``engine``."""

    def __init__(self, client: Client, engine: CacheEngine) -> None:
        self.client = client
        self.engine = engine

    def chat_completion(
        self, request: ChatCompletionRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> ChatCompletionResponse:
        key = compute_hash_key(request)
        return cached_call(
            self.engine,
            key,
            lambda: self.client.chat_completion(request, cancel_token=cancel_token),
            lambda res: CachedData(key=key, chat_completion_request=request, chat_completion_response=res),
            lambda data: data.chat_completion_response,
            what="chat completion response",
            ctx=LogContext(endpoint="chat_completion", model=request.model),
        )

    def embeddings(
        self, request: EmbeddingRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> EmbeddingResponse:
        key = compute_hash_key(request)
        return cached_call(
            self.engine,
            key,
            lambda: self.client.embeddings(request, cancel_token=cancel_token),
            lambda res: CachedData(key=key, embedding_request=request, embedding_response=res),
            lambda data: data.embedding_response,
            what="embedding response",
            ctx=LogContext(endpoint="embeddings", model=request.model),
        )

    def chat_completion_stream(
        self, request: ChatCompletionRequest, *, cancel_token: Optional[CancellationToken] = None
    ) -> ChunkStream:
        key = compute_hash_key(request)
        ctx = LogContext(endpoint="chat_completion_stream", model=request.model)
        raw = _read(self.engine, key, ctx)
        if raw is not None:
            chunks = _decode(raw, lambda data: data.completion_chunks, "completion chunks")
            return ChunkStream.from_chunks(chunks, cancel_token=cancel_token, ctx=ctx)

        upstream = self.client.chat_completion_stream(request, cancel_token=cancel_token)
        return ChunkStream(
            self._relay(key, request, upstream, ctx),
            on_close=upstream.close,
            abort=upstream.close,
            cancel_token=cancel_token,
            ctx=ctx,
        )

    def _relay(
        self,
        key: str,
        request: ChatCompletionRequest,
        upstream: ChunkStream,
        ctx: LogContext,
    ) -> Iterator[CompletionChunk]:
        buffered: List[CompletionChunk] = []
        for chunk in upstream:
            buffered.append(chunk)
            yield chunk
        if upstream.cancelled:
            log_event(_logger, "cache.skip", ctx, key=key, reason="cancelled", level=logging.DEBUG)
            return
        if any(c.error is not None for c in buffered):
            log_event(_logger, "cache.skip", ctx, key=key, reason="stream error", level=logging.DEBUG)
            return
        envelope = CachedData(key=key, chat_completion_request=request, completion_chunks=buffered)
        try:
            _write(self.engine, key, envelope, ctx, None)
        except CacheFailureError as e:
            yield CompletionChunk.error_chunk(e)

    def list_models(self, *, cancel_token: Optional[CancellationToken] = None) -> List[ModelCard]:
        return self.client.list_models(cancel_token=cancel_token)

    def search_models(
        self, capabilities: ModelCapabilities, *, cancel_token: Optional[CancellationToken] = None
    ) -> List[ModelCard]:
        return self.client.search_models(capabilities, cancel_token=cancel_token)

    def get_model(self, model_id: str, *, cancel_token: Optional[CancellationToken] = None) -> ModelCard:
        return self.client.get_model(model_id, cancel_token=cancel_token)

    def close(self) -> None:
        self.client.close()


def new_cached(client: Client, engine: CacheEngine) -> CachedClient:
    """Wrap ``client`` with a response cache stored in ``engine``."""
    return CachedClient(client, engine)


__all__ = ["cached_call", "CachedClient", "new_cached"]
