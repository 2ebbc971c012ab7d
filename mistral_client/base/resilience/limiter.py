"""Client-side call rate limiting.

``TokenBucketRateLimiter`` holds up to ``capacity`` call tokens, starts full,
and a daemon thread adds ``rate`` tokens every ``interval`` seconds (never
beyond capacity). ``wait`` consumes one token, blocking while the bucket is
empty. It is safe for concurrent callers; blocked callers queue implicitly on
the shared condition variable.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Protocol, runtime_checkable

from ..cancellation import CancellationToken
from ..logging import get_logger, log_event

_logger = get_logger("mistral_client.limiter")

# Upper bound on how long a blocked waiter sleeps before re-checking cancellation.
_CANCEL_POLL_SECONDS = 0.05


@runtime_checkable
class RateLimiter(Protocol):
    def wait(self, cancel_token: Optional[CancellationToken] = None) -> None: ...

    def stop(self) -> None: ...


class TokenBucketRateLimiter:
    """Token bucket refilled on a fixed schedule.

    Parameters:
        rate: Tokens added per ``interval``.
        capacity: Maximum number of tokens held (also the initial amount).
        interval: Refill period in seconds.

    Raises:
        ValueError: When any parameter is not strictly positive.
    """

    def __init__(self, rate: int, capacity: int, interval: float = 1.0) -> None:
        if rate <= 0 or capacity <= 0 or interval <= 0:
            raise ValueError("rate, capacity and interval must be positive")
        self.rate = rate
        self.capacity = capacity
        self.interval = interval
        self._tokens = capacity
        self._cond = threading.Condition()
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._refill_loop, name="mistral-rate-limiter", daemon=True)
        self._thread.start()

    @property
    def available(self) -> int:
        with self._cond:
            return self._tokens

    def _refill_loop(self) -> None:
        while not self._stopped.wait(self.interval):
            with self._cond:
                added = min(self.rate, self.capacity - self._tokens)
                if added > 0:
                    self._tokens += added
                    self._cond.notify(added)

    def wait(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Consume one token, blocking until one is available.

        Raises:
            CancelledError: ``cancel_token`` was cancelled while waiting.
            RuntimeError: The limiter was stopped with an empty bucket.
        """
        started = time.monotonic()
        blocked = False
        with self._cond:
            while self._tokens <= 0:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                if self._stopped.is_set():
                    raise RuntimeError("rate limiter stopped")
                blocked = True
                self._cond.wait(timeout=min(self.interval, _CANCEL_POLL_SECONDS))
            self._tokens -= 1
        if blocked:
            log_event(
                _logger,
                "limiter.wait",
                waited_ms=round((time.monotonic() - started) * 1000.0, 3),
                level=logging.DEBUG,
            )

    def stop(self) -> None:
        """Stop refilling; idempotent."""
        self._stopped.set()
        with self._cond:
            self._cond.notify_all()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 1.0)


class NoneRateLimiter:
    """Limiter that never blocks."""

    def wait(self, cancel_token: Optional[CancellationToken] = None) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

    def stop(self) -> None:
        return None


__all__ = ["RateLimiter", "TokenBucketRateLimiter", "NoneRateLimiter"]
