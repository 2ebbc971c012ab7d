"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of a request: during a backoff wait, a rate-limiter wait, or between stream
frames.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Distinguishes cooperative cancellation from other runtime failures so the
    retry loop never retries it.
    """

__all__ = ["CancelledError"]
