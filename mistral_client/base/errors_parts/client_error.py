"""
Structured client exception types.

``ClientError`` carries a normalized `ErrorCode` so callers can branch on the
failure category (retryable, not found, cache related, ...) without matching
on message text. Subclasses below cover the failure paths of the transport,
the decoders and the cache decorator. ``ApiError`` lives in its own module
because of its message formatting rules.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ClientError(Exception):
    """Base class for every error the client raises on purpose.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        retryable: Whether the failure is transient (informative only).
        raw: Optional underlying exception, also chained as ``__cause__`` by callers.
    """

    code: ErrorCode
    message: str
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:
        return self.message


class HttpStatusError(ClientError):
    """Non-2xx response outside both the retry set and the 4xx range."""

    def __init__(self, status_code: int, body: str = "", *, reason: str = "") -> None:
        status = f"{status_code} {reason}".strip()
        super().__init__(
            code=ErrorCode.SERVER_ERROR if status_code >= 500 else ErrorCode.UNKNOWN,
            message=f"HTTP request failed with status {status} and body '{body}'",
        )
        self.status_code = status_code
        self.body = body


class RetriesExhaustedError(ClientError):
    """Every attempt failed with a retryable condition.

    Only the last failure is preserved, as ``last_error``.
    """

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None) -> None:
        super().__init__(
            code=ErrorCode.RETRIES_EXHAUSTED,
            message=f"exhausted retries without a successful response after {attempts} attempt(s)",
            retryable=False,
            raw=last_error,
        )
        self.attempts = attempts
        self.last_error = last_error


class DecodeError(ClientError):
    """Malformed response body, stream frame or polymorphic content."""

    def __init__(self, message: str, raw: Optional[BaseException] = None) -> None:
        super().__init__(code=ErrorCode.DECODE, message=message, raw=raw)


class CacheFailureError(ClientError):
    """The cache subsystem failed; ``raw`` holds the store or codec error.

    When the failure happened after a successful upstream call, the upstream
    payload is kept on ``response`` so callers can still recover it.
    """

    def __init__(
        self,
        message: str = "cache failure",
        raw: Optional[BaseException] = None,
        *,
        response: Any = None,
    ) -> None:
        detail = f"{message}: {raw}" if raw is not None else message
        super().__init__(code=ErrorCode.CACHE_FAILURE, message=detail, raw=raw)
        self.response = response


__all__ = [
    "ClientError",
    "HttpStatusError",
    "RetriesExhaustedError",
    "DecodeError",
    "CacheFailureError",
]
