"""Cooperative cancellation (public import path).

Pass a ``CancellationToken`` as ``cancel_token=`` to any client call; cancel
it from another thread to abort a backoff wait, a rate-limiter wait or a
running stream. Aborted calls raise ``CancelledError``.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
