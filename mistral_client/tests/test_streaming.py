"""SSE parsing, latency accounting and the threaded chunk iterator."""
from __future__ import annotations

import itertools
import json
import threading
import time
from typing import Iterator, List

import httpx
import pytest

from mistral_client.base.cancellation import CancellationToken
from mistral_client.base.errors import ClientError, DecodeError, ErrorCode
from mistral_client.base.models import ChatCompletionRequest, CompletionChunk, UserMessage
from mistral_client.base.streaming import ChunkStream, iter_chunks, parse_data_line


def _stream_request() -> ChatCompletionRequest:
    return ChatCompletionRequest("mistral-small-latest", [UserMessage("Hi")]).with_streaming()


def _fake_clock():
    ticks = itertools.count()
    return lambda: float(next(ticks))


@pytest.mark.parametrize(
    "line, expected",
    [
        ("data: {\"a\": 1}", "{\"a\": 1}"),
        ("data: [DONE]  ", "[DONE]"),
        (": keepalive", None),
        ("", None),
        ("event: message", None),
    ],
)
def test_parse_data_line(line, expected):
    assert parse_data_line(line) == expected  # nosec B101


def test_stream_yields_every_chunk(make_client, sse, make_chunk):
    payloads = [make_chunk(0, "Hel"), make_chunk(1, "lo"), make_chunk(2, "!", "stop")]
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=sse(payloads), headers={"Content-Type": "text/event-stream"})

    client = make_client(handler)
    with client.chat_completion_stream(_stream_request()) as stream:
        chunks = stream.collect()

    assert json.loads(seen[0].content)["stream"] is True  # nosec B101
    assert len(chunks) == 3  # nosec B101
    assert [c.delta_message().content for c in chunks] == ["Hel", "lo", "!"]  # nosec B101
    assert all(c.error is None for c in chunks)  # nosec B101
    last = chunks[-1]
    assert last.is_last_chunk and last.finish_reason() == "stop"  # nosec B101
    assert not chunks[0].is_last_chunk  # nosec B101
    assert last.total_latency >= last.chunk_latency  # nosec B101
    assert last.usage is not None and last.usage.total_tokens == 6  # nosec B101


def test_non_streaming_request_is_rejected(make_client):
    client = make_client(lambda request: httpx.Response(200))
    with pytest.raises(ValueError):
        client.chat_completion_stream(ChatCompletionRequest("m", [UserMessage("Hi")]))
    with pytest.raises(ValueError):
        client.chat_completion(_stream_request())


def test_keepalives_are_skipped_and_latency_accumulates(make_chunk):
    lines = [
        "data: " + json.dumps(make_chunk(0, "a")),
        ": keepalive",
        "",
        "data: " + json.dumps(make_chunk(1, "b", "stop")),
        "data: [DONE]",
        "data: " + json.dumps(make_chunk(2, "never read")),
    ]
    chunks = list(iter_chunks(lines, open_latency=0.5, clock=_fake_clock()))

    assert [c.delta_message().content for c in chunks] == ["a", "b"]  # nosec B101
    assert chunks[0].chunk_latency == 1.0  # nosec B101
    # three reads of one tick each: two skipped lines and the data line
    assert chunks[1].chunk_latency == 3.0  # nosec B101
    assert chunks[1].total_latency == 0.5 + 1.0 + 3.0  # nosec B101
    assert chunks[0].total_latency == 0.0  # nosec B101


def test_stream_without_done_ends_at_eof(make_chunk):
    lines = ["data: " + json.dumps(make_chunk(0, "a"))]
    assert len(list(iter_chunks(lines))) == 1  # nosec B101


def test_decode_error_yields_one_error_chunk_and_stops(make_chunk):
    lines = [
        "data: " + json.dumps(make_chunk(0, "ok")),
        "data: {not json",
        "data: " + json.dumps(make_chunk(1, "unreachable")),
    ]
    chunks = list(iter_chunks(lines))

    assert len(chunks) == 2  # nosec B101
    assert chunks[0].error is None  # nosec B101
    err = chunks[1].error
    assert isinstance(err, DecodeError)  # nosec B101
    assert "failed to unmarshal response chunk 1 '{not json'" in str(err)  # nosec B101


def test_read_failure_yields_error_chunk(make_chunk):
    def lines() -> Iterator[str]:
        yield "data: " + json.dumps(make_chunk(0, "ok"))
        raise httpx.ReadError("connection reset")

    chunks = list(iter_chunks(lines()))
    assert len(chunks) == 2  # nosec B101
    err = chunks[1].error
    assert isinstance(err, ClientError)  # nosec B101
    assert err.code is ErrorCode.TRANSIENT  # nosec B101
    assert "failed to read response line" in str(err)  # nosec B101


def test_chunk_stream_replays_in_order():
    chunks = [CompletionChunk(id=str(i)) for i in range(5)]
    closed = threading.Event()
    stream = ChunkStream.from_chunks(chunks, on_close=closed.set)
    assert [c.id for c in stream] == ["0", "1", "2", "3", "4"]  # nosec B101
    assert closed.wait(1.0)  # nosec B101
    assert list(stream) == []  # nosec B101


def test_close_stops_producer_and_closes_source():
    produced: List[int] = []
    closed = threading.Event()

    def endless() -> Iterator[CompletionChunk]:
        for i in itertools.count():
            produced.append(i)
            yield CompletionChunk(id=str(i))

    stream = ChunkStream(endless(), on_close=closed.set)
    first = next(stream)
    stream.close()

    assert first.id == "0"  # nosec B101
    assert closed.wait(1.0)  # nosec B101
    # bounded queue: the producer never runs far ahead of the consumer
    assert len(produced) <= 4  # nosec B101
    with pytest.raises(StopIteration):
        next(stream)
    stream.close()


def test_parent_cancellation_ends_stream():
    token = CancellationToken()
    closed = threading.Event()

    def endless() -> Iterator[CompletionChunk]:
        while True:
            yield CompletionChunk()

    stream = ChunkStream(endless(), on_close=closed.set, cancel_token=token)
    next(stream)
    token.cancel("shutdown")
    assert closed.wait(1.0)  # nosec B101
    remaining = stream.collect()
    assert len(remaining) <= 2  # nosec B101


def test_source_exception_becomes_error_chunk():
    def failing() -> Iterator[CompletionChunk]:
        yield CompletionChunk(id="a")
        raise OSError("socket closed")

    chunks = ChunkStream(failing()).collect()
    assert [c.id for c in chunks[:1]] == ["a"]  # nosec B101
    assert len(chunks) == 2  # nosec B101
    assert isinstance(chunks[1].error, ClientError)  # nosec B101


def test_unexpected_source_failure_becomes_error_chunk():
    def broken() -> Iterator[CompletionChunk]:
        yield CompletionChunk(id="a")
        raise AttributeError("'int' object has no attribute 'get'")

    stream = ChunkStream(broken())
    chunks = stream.collect()
    stream._thread.join(1.0)

    assert len(chunks) == 2  # nosec B101
    assert isinstance(chunks[1].error, ClientError)  # nosec B101
    assert isinstance(chunks[1].error.raw, AttributeError)  # nosec B101
    assert not stream._thread.is_alive()  # nosec B101


def test_response_closed_after_stream(make_client, sse, make_chunk):
    class _Body(httpx.SyncByteStream):
        def __init__(self, data: bytes) -> None:
            self.data = data
            self.closed = threading.Event()

        def __iter__(self):
            yield self.data

        def close(self) -> None:
            self.closed.set()

    body = _Body(sse([make_chunk(0, "x", "stop")]))
    client = make_client(lambda request: httpx.Response(200, stream=body))
    chunks = client.chat_completion_stream(_stream_request()).collect()

    assert len(chunks) == 1  # nosec B101
    assert body.closed.wait(1.0)  # nosec B101


@pytest.mark.parametrize(
    "payload",
    [
        '{"id": "a", "choices": [1]}',
        '{"id": "a", "choices": {"index": 0}}',
        '{"id": "a", "choices": [{"index": "first", "delta": {}}]}',
        '{"id": "a", "choices": [{"index": 0, "delta": {}, "finish_reason": 7}]}',
        "[1, 2]",
    ],
)
def test_wrong_shape_frame_yields_decode_error(payload):
    chunks = list(iter_chunks(["data: " + payload, "data: [DONE]"]))
    assert len(chunks) == 1  # nosec B101
    assert isinstance(chunks[0].error, DecodeError)  # nosec B101
    assert "failed to unmarshal response chunk 0" in str(chunks[0].error)  # nosec B101


def test_wrong_shape_frame_through_the_client(make_client, sse, make_chunk):
    body = sse([make_chunk(0, "ok"), '{"id": "a", "choices": [1]}'])
    client = make_client(lambda request: httpx.Response(200, content=body))

    chunks = client.chat_completion_stream(_stream_request()).collect()

    assert len(chunks) == 2  # nosec B101
    assert chunks[0].error is None  # nosec B101
    assert isinstance(chunks[1].error, DecodeError)  # nosec B101


class _BlockingBody(httpx.SyncByteStream):
    """Yields ``head`` then blocks until the response is closed."""

    def __init__(self, head: bytes) -> None:
        self.head = head
        self.closed = threading.Event()

    def __iter__(self):
        yield self.head
        self.closed.wait(5.0)

    def close(self) -> None:
        self.closed.set()


def test_close_interrupts_a_blocked_read(make_client, sse, make_chunk):
    body = _BlockingBody(sse([make_chunk(0, "first")], done=False))
    client = make_client(lambda request: httpx.Response(200, stream=body))

    stream = client.chat_completion_stream(_stream_request())
    first = next(stream)
    t0 = time.monotonic()
    stream.close()

    assert first.delta_message().content == "first"  # nosec B101
    assert body.closed.is_set()  # nosec B101
    assert not stream._thread.is_alive()  # nosec B101
    assert time.monotonic() - t0 < 2.0  # nosec B101
    assert stream.collect() == []  # nosec B101


def test_parent_cancel_interrupts_a_blocked_read(make_client, sse, make_chunk):
    body = _BlockingBody(sse([make_chunk(0, "first")], done=False))
    client = make_client(lambda request: httpx.Response(200, stream=body))
    token = CancellationToken()

    stream = client.chat_completion_stream(_stream_request(), cancel_token=token)
    next(stream)
    token.cancel("shutdown")

    assert body.closed.wait(1.0)  # nosec B101
    assert stream.collect() == []  # nosec B101
    stream._thread.join(1.0)
    assert not stream._thread.is_alive()  # nosec B101
