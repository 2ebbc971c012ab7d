"""Server-sent-event frame parsing for chat completion streams.

The body is read line by line:

* lines without the ``data: `` prefix (keepalives, comments, blank
  separators) are skipped;
* ``data: [DONE]`` ends the stream cleanly;
* any other data payload is decoded as one :class:`CompletionChunk`.

A decode or read failure yields a single error-bearing chunk and stops; no
further lines are read afterwards.

Latency accounting: the time spent waiting for lines accumulates until a
chunk is emitted and becomes that chunk's ``chunk_latency``. The running
total starts at the connection-open latency; a chunk whose first choice has
a finish reason is the terminal chunk and carries that total.
"""
from __future__ import annotations

import json
import time
from typing import Callable, Iterable, Iterator, Optional

import httpx

from ...config.defaults import SSE_DATA_PREFIX, SSE_DONE_SENTINEL
from ..errors import ClientError, DecodeError, classify_exception
from ..models import CompletionChunk

_READ_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError, EOFError)


def parse_data_line(line: str) -> Optional[str]:
    """Return the trimmed payload of a ``data: `` line, else ``None``."""
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    return line[len(SSE_DATA_PREFIX):].strip()


def decode_chunk_payload(payload: str, index: int) -> CompletionChunk:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise DecodeError(f"failed to unmarshal response chunk {index} '{payload}': {e}", raw=e) from e
    try:
        return CompletionChunk.from_dict(data)
    except (DecodeError, AttributeError, TypeError, ValueError) as e:
        # wrong-shaped frames must end the stream with an error chunk too
        raise DecodeError(f"failed to unmarshal response chunk {index} '{payload}': {e}", raw=e) from e


def iter_chunks(
    lines: Iterable[str],
    open_latency: float = 0.0,
    *,
    clock: Callable[[], float] = time.perf_counter,
) -> Iterator[CompletionChunk]:
    """Yield decoded chunks from SSE ``lines``."""
    it = iter(lines)
    pending = 0.0
    total = open_latency
    index = 0
    while True:
        t0 = clock()
        try:
            line = next(it)
        except StopIteration:
            return
        except _READ_ERRORS as exc:
            err = ClientError(
                code=classify_exception(exc),
                message=f"failed to read response line: {exc}",
                raw=exc,
            )
            err.__cause__ = exc
            yield CompletionChunk(error=err)
            return
        pending += clock() - t0

        payload = parse_data_line(line)
        if payload is None:
            continue
        if payload == SSE_DONE_SENTINEL:
            return
        try:
            chunk = decode_chunk_payload(payload, index)
        except DecodeError as err:
            yield CompletionChunk(error=err)
            return
        chunk.chunk_latency = pending
        total += pending
        pending = 0.0
        if chunk.is_last_chunk:
            chunk.total_latency = total
        yield chunk
        index += 1


__all__ = ["parse_data_line", "decode_chunk_payload", "iter_chunks"]
