"""Pytest configuration for the client test suite.

Provides:
- isolation from ``MISTRAL_*`` variables of the developer environment;
- ``make_client``: a ``MistralClient`` whose HTTP traffic goes to an
  ``httpx.MockTransport`` handler, with near-zero backoff waits;
- ``sse``: builds an event-stream body from chunk payloads;
- ``captured_logs``: JSON payloads emitted on the ``mistral_client`` logger.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List

import httpx
import pytest

from mistral_client.base.logging import get_logger
from mistral_client.client import MistralClient
from mistral_client.config import ClientConfig


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop every ``MISTRAL_*`` variable for the duration of a test."""
    import os

    for name in list(os.environ):
        if name.startswith("MISTRAL_"):
            monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture()
def make_client() -> Iterator[Callable[..., MistralClient]]:
    """Factory building clients backed by a mock transport handler."""
    created: List[MistralClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **overrides: Any) -> MistralClient:
        settings: Dict[str, Any] = {
            "api_key": "sk-unit",  # pragma: allowlist secret - fake key
            "retry_wait_min_seconds": 0.001,
            "retry_wait_max_seconds": 0.002,
            "transport": httpx.MockTransport(handler),
        }
        settings.update(overrides)
        client = MistralClient(ClientConfig(**settings))
        created.append(client)
        return client

    yield _make
    for client in created:
        client.close()


def sse_body(payloads: Iterable[Any], *, done: bool = True) -> bytes:
    """Render chunk payloads as ``data: <json>`` frames."""
    lines = []
    for p in payloads:
        data = p if isinstance(p, str) else json.dumps(p)
        lines.append(f"data: {data}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture()
def sse() -> Callable[..., bytes]:
    return sse_body


def chunk_payload(index: int, text: str, finish_reason: str | None = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": "cmpl-1",
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "mistral-small-latest",
        "choices": [
            {
                "index": 0,
                "delta": {"role": "assistant", "content": text},
                "finish_reason": finish_reason,
            }
        ],
    }
    if finish_reason:
        payload["usage"] = {"prompt_tokens": 3, "completion_tokens": index + 1, "total_tokens": index + 4}
    return payload


@pytest.fixture()
def make_chunk() -> Callable[..., Dict[str, Any]]:
    return chunk_payload


class _ListHandler(logging.Handler):
    """Capture JSON log payloads into a list."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            payload = {"msg": record.getMessage()}
        if isinstance(payload, dict):
            self.events.append(payload)


@pytest.fixture()
def captured_logs() -> Iterator[List[Dict[str, Any]]]:
    logger = get_logger()
    handler = _ListHandler()
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    yield handler.events
    logger.removeHandler(handler)
    logger.setLevel(previous)
