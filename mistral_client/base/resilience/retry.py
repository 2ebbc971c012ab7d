from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, Optional, Protocol

from ...config.defaults import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_RETRY_WAIT_MAX_SECONDS,
    DEFAULT_RETRY_WAIT_MIN_SECONDS,
)

if TYPE_CHECKING:  # pragma: no cover
    from ...config import ClientConfig


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: BaseException | None,
        status_code: int | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy of the HTTP transport.

    ``max_retries`` counts retries after the first attempt, so a call makes
    at most ``1 + max_retries`` attempts. Backoff is full-jitter exponential:
    attempt 0 waits exactly ``wait_min``; attempt ``n > 0`` waits a uniform
    draw from ``[0, min(wait_min * 2**n, wait_max))``.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    wait_min: float = DEFAULT_RETRY_WAIT_MIN_SECONDS
    wait_max: float = DEFAULT_RETRY_WAIT_MAX_SECONDS
    status_codes: FrozenSet[int] = field(default_factory=lambda: frozenset(DEFAULT_RETRY_STATUS_CODES))
    attempt_logger: Optional[AttemptLogger] = None

    @classmethod
    def from_client_config(
        cls, config: "ClientConfig", attempt_logger: Optional[AttemptLogger] = None
    ) -> "RetryConfig":
        return cls(
            max_retries=config.max_retries,
            wait_min=config.retry_wait_min_seconds,
            wait_max=config.retry_wait_max_seconds,
            status_codes=frozenset(config.retry_status_codes),
            attempt_logger=attempt_logger,
        )

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries

    def has_attempts_left(self, attempt: int) -> bool:
        """True when ``attempt`` (0-indexed) is not the last one allowed."""
        return attempt < self.max_retries

    def is_retry_status(self, status_code: int) -> bool:
        return status_code in self.status_codes

    def ceiling(self, attempt: int) -> float:
        """Upper bound of the wait before retrying after ``attempt``."""
        if attempt <= 0:
            return self.wait_min
        return min(self.wait_min * (2 ** attempt), self.wait_max)

    def next_backoff(self, attempt: int, rng: Optional[random.Random] = None) -> float:
        """Seconds to wait after a failed ``attempt`` (0-indexed)."""
        if attempt <= 0:
            return self.wait_min
        draw = (rng or random).random()  # nosec B311 - jitter, not cryptography
        return draw * self.ceiling(attempt)


DEFAULT_RETRY_CONFIG = RetryConfig()


__all__ = [
    "AttemptLogger",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
]
