"""Threaded producer / iterator consumer for completion chunks.

``ChunkStream`` runs its source on a daemon producer thread and hands chunks
to the consumer through a ``queue.Queue(maxsize=1)``, so at most one chunk
waits in the queue while the producer blocks. The producer alone closes the
underlying resource (``on_close``, e.g. the HTTP response) and then marks the
end of the stream, in that order, on every exit path. An ``abort`` callback,
run when the stream is cancelled, unblocks a producer stuck in a read; it
only interrupts the source and never replaces ``on_close``.

Usage::

    with client.chat_completion_stream(req) as stream:
        for chunk in stream:
            ...
"""
from __future__ import annotations

import queue
import threading
from typing import Callable, Iterable, Iterator, List, Optional

from ..cancellation import CancellationToken
from ..errors import ClientError, classify_exception
from ..logging import LogContext, get_logger, log_event
from ..models import CompletionChunk

_END = object()
_PUT_POLL_SECONDS = 0.05
_JOIN_TIMEOUT_SECONDS = 1.0

_logger = get_logger("mistral_client.stream")


class ChunkStream:
    """Iterator of :class:`CompletionChunk` fed by a producer thread.

    Parameters:
        source: Iterable producing the chunks (consumed on the producer thread).
        on_close: Called by the producer once the source is done.
        abort: Called on cancellation, from the cancelling thread, to
            interrupt a blocked read of the source (e.g. ``response.close``).
        cancel_token: Token observed by the producer; ``close()`` cancels it.
        ctx: Logging context for ``stream.*`` events.
    """

    def __init__(
        self,
        source: Iterable[CompletionChunk],
        *,
        on_close: Optional[Callable[[], None]] = None,
        abort: Optional[Callable[[], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._source = source
        self._on_close = on_close
        self._token = cancel_token.child() if cancel_token is not None else CancellationToken()
        self._ctx = ctx
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=1)
        self._done = False
        self._unregister_abort = self._token.on_cancel(abort) if abort is not None else None
        self._thread = threading.Thread(target=self._produce, name="mistral-chunk-stream", daemon=True)
        self._thread.start()

    @property
    def cancelled(self) -> bool:
        """True once the stream was closed early or its token cancelled."""
        return self._token.cancelled

    @classmethod
    def from_chunks(cls, chunks: List[CompletionChunk], **kwargs) -> "ChunkStream":
        """Replay an in-memory chunk list in order."""
        return cls(list(chunks), **kwargs)

    def _put(self, item: object) -> bool:
        """Blocking put that gives up once the stream is cancelled."""
        while True:
            try:
                self._queue.put(item, timeout=_PUT_POLL_SECONDS)
                return True
            except queue.Full:
                if self._token.cancelled:
                    return False

    def _produce(self) -> None:
        count = 0
        try:
            iterator = iter(self._source)
            try:
                while not self._token.cancelled:
                    try:
                        chunk = next(iterator)
                    except StopIteration:
                        break
                    except Exception as exc:  # any source failure ends the stream with one error chunk
                        if self._token.cancelled:
                            # the abort callback interrupted the read
                            break
                        chunk = CompletionChunk(
                            error=ClientError(
                                code=classify_exception(exc),
                                message=f"stream source failed: {exc}",
                                raw=exc,
                            )
                        )
                        self._put(chunk)
                        count += 1
                        break
                    if self._token.cancelled:
                        break
                    if chunk.error is not None:
                        log_event(_logger, "stream.chunk_error", self._ctx, error=str(chunk.error))
                    if not self._put(chunk):
                        break
                    count += 1
            finally:
                close_gen = getattr(iterator, "close", None)
                if callable(close_gen):
                    close_gen()
        finally:
            if self._unregister_abort is not None:
                self._unregister_abort()
            if self._on_close is not None:
                self._on_close()
            log_event(
                _logger,
                "stream.end",
                self._ctx,
                chunks=count,
                cancelled=self._token.cancelled,
            )
            self._put(_END)

    def __iter__(self) -> Iterator[CompletionChunk]:
        return self

    def __next__(self) -> CompletionChunk:
        if self._done:
            raise StopIteration
        while True:
            try:
                item = self._queue.get(timeout=_PUT_POLL_SECONDS)
                break
            except queue.Empty:
                if not self._thread.is_alive() and self._queue.empty():
                    item = _END
                    break
        if item is _END:
            self._done = True
            raise StopIteration
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Stop consuming; the producer closes the source and exits."""
        if self._done and not self._thread.is_alive():
            return
        self._done = True
        self._token.cancel("stream closed by consumer")
        # Unblock a producer waiting on a full queue.
        try:
            while True:
                self._queue.get_nowait()
        except queue.Empty:
            pass
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=_JOIN_TIMEOUT_SECONDS)

    def collect(self) -> List[CompletionChunk]:
        """Drain the remaining chunks into a list."""
        return list(self)

    def __enter__(self) -> "ChunkStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["ChunkStream"]
