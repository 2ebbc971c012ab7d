"""Retrying HTTP transport.

Wraps an ``httpx.Client`` with the retry policy of :class:`RetryConfig`:

* at most ``1 + max_retries`` sequential attempts;
* statuses in the retry set are retried while attempts remain;
* transport errors classified retryable (timeouts, unexpected end of stream)
  are retried while attempts remain; cancellation never is;
* other 4xx responses raise :class:`ApiError` at once;
* any other non-2xx response raises :class:`HttpStatusError` at once;
* running out of attempts raises :class:`RetriesExhaustedError` carrying the
  last failure.

Backoff waits go through the cancellation token so a cancel aborts the call
immediately with :class:`CancelledError`. Bodies are read under an
``on_cancel`` callback that closes the response, so a cancel also ends a
blocked body read. The wait for response headers is bounded only by the
timeouts of the underlying ``httpx.Client``.
"""
from __future__ import annotations

import json
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..cancellation import CancellationToken, CancelledError
from ..errors import (
    ApiError,
    ClientError,
    HttpStatusError,
    RetriesExhaustedError,
    classify_exception,
    is_retryable_exception,
)
from ..logging import LogContext, get_logger, normalized_log_event
from ..resilience.retry import RetryConfig

_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError, EOFError)


@dataclass
class TransportResponse:
    """Successful (2xx) response plus attempt bookkeeping.

    Attributes:
        response: The ``httpx.Response``. For streamed sends the body is not
            read yet and the caller must close it.
        latency: Wall-clock seconds of the successful attempt.
        attempts: Number of attempts used, including the successful one.
    """

    response: httpx.Response
    latency: float
    attempts: int

    def json(self) -> Any:
        return self.response.json()


class RetryingTransport:
    """Send requests through ``http`` applying ``retry``.

    Parameters:
        http: Client bound to the API base URL (see ``create_httpx_client``).
        retry: Retry policy.
        verbose: Log attempt/retry events at INFO instead of DEBUG.
        rng: Optional ``random.Random`` used for backoff jitter.
    """

    def __init__(
        self,
        http: httpx.Client,
        retry: RetryConfig,
        *,
        verbose: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._http = http
        self.retry = retry
        self._rng = rng
        self._level = logging.INFO if verbose else logging.DEBUG
        self._logger = get_logger("mistral_client.http")

    def close(self) -> None:
        self._http.close()

    def send(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        stream: bool = False,
        cancel_token: Optional[CancellationToken] = None,
        ctx: Optional[LogContext] = None,
    ) -> TransportResponse:
        """Send one logical request, retrying per policy.

        Raises:
            ApiError: Non-retryable 4xx response.
            HttpStatusError: Non-retryable non-4xx, non-2xx response.
            RetriesExhaustedError: Every attempt failed with a retryable condition.
            CancelledError: ``cancel_token`` was cancelled.
            ClientError: Non-retryable transport failure.
        """
        token = cancel_token or CancellationToken()
        ctx = ctx or LogContext(endpoint=path)
        content = json.dumps(body).encode("utf-8") if body is not None else None
        last_error: Optional[BaseException] = None

        for attempt in range(self.retry.max_attempts):
            token.raise_if_cancelled()
            request = self._http.build_request(method, path, content=content)
            t0 = time.perf_counter()
            try:
                response = self._http.send(request, stream=True)
                if not stream:
                    self._read_body(response, token)
            except CancelledError:
                raise
            except _TRANSPORT_ERRORS as exc:
                if token.cancelled:
                    raise CancelledError(token.reason or "operation cancelled") from exc
                latency = time.perf_counter() - t0
                self._log_attempt(ctx, attempt, latency, error=exc)
                if not is_retryable_exception(exc):
                    raise ClientError(
                        code=classify_exception(exc),
                        message=f"failed to make HTTP request: {exc}",
                        raw=exc,
                    ) from exc
                last_error = exc
                if self.retry.has_attempts_left(attempt):
                    self._backoff(ctx, attempt, token, exc)
                    continue
                raise RetriesExhaustedError(attempt + 1, exc) from exc

            latency = time.perf_counter() - t0
            status = response.status_code
            self._log_attempt(ctx, attempt, latency, status_code=status)
            if 200 <= status < 300:
                return TransportResponse(response=response, latency=latency, attempts=attempt + 1)

            error = self._status_error(response)
            if self.retry.is_retry_status(status):
                last_error = error
                if self.retry.has_attempts_left(attempt):
                    self._backoff(ctx, attempt, token, error)
                    continue
                raise RetriesExhaustedError(attempt + 1, error) from error
            normalized_log_event(
                self._logger,
                "http.error",
                ctx,
                phase="response",
                attempt=attempt + 1,
                error_code=error.code.value,
                latency_ms=latency * 1000.0,
                status_code=status,
                level=self._level,
            )
            raise error

        # Only reachable when max_retries is negative.
        raise RetriesExhaustedError(self.retry.max_attempts, last_error)

    def open_stream(
        self,
        path: str,
        body: Dict[str, Any],
        *,
        cancel_token: Optional[CancellationToken] = None,
        ctx: Optional[LogContext] = None,
    ) -> TransportResponse:
        """POST ``body`` and return the unread streaming response."""
        return self.send("POST", path, body, stream=True, cancel_token=cancel_token, ctx=ctx)

    @staticmethod
    def _read_body(response: httpx.Response, token: CancellationToken) -> None:
        """Read the whole body; cancelling ``token`` closes the response mid-read.

        Raises:
            CancelledError: The token was cancelled before or during the read.
        """
        unregister = token.on_cancel(response.close)
        try:
            response.read()
        except BaseException:
            response.close()
            raise
        finally:
            unregister()
        # a close during the read can leave a truncated body behind
        token.raise_if_cancelled()

    @staticmethod
    def _status_error(response: httpx.Response) -> ClientError:
        """Read and close a failed response, returning the matching error."""
        try:
            response.read()
        finally:
            response.close()
        status = response.status_code
        if 400 <= status < 500:
            try:
                content = response.json()
            except ValueError:
                content = None
            return ApiError(status, content if isinstance(content, dict) else None)
        return HttpStatusError(status, response.text, reason=response.reason_phrase)

    def _backoff(
        self,
        ctx: LogContext,
        attempt: int,
        token: CancellationToken,
        error: BaseException,
    ) -> None:
        delay = self.retry.next_backoff(attempt, self._rng)
        normalized_log_event(
            self._logger,
            "http.retry",
            ctx,
            phase="backoff",
            attempt=attempt + 1,
            error_code=classify_exception(error).value,
            delay_ms=round(delay * 1000.0, 3),
            max_attempts=self.retry.max_attempts,
            level=self._level,
        )
        if self.retry.attempt_logger:
            self.retry.attempt_logger(
                attempt=attempt,
                max_attempts=self.retry.max_attempts,
                delay=delay,
                error=error,
                status_code=getattr(error, "status_code", None),
            )
        token.sleep(delay)

    def _log_attempt(
        self,
        ctx: LogContext,
        attempt: int,
        latency: float,
        *,
        status_code: Optional[int] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        normalized_log_event(
            self._logger,
            "http.attempt",
            ctx,
            phase="request",
            attempt=attempt + 1,
            error_code=classify_exception(error).value if error is not None else None,
            latency_ms=latency * 1000.0,
            status_code=status_code,
            level=self._level,
        )


__all__ = ["RetryingTransport", "TransportResponse"]
