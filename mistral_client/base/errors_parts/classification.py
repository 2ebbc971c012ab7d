"""
Exception classification helpers.

Maps transport-level exceptions (httpx, stdlib timeouts, cooperative
cancellation) and HTTP statuses to normalized `ErrorCode` values, and decides
which of them the retry loop may retry.
"""
from __future__ import annotations

from typing import Dict, Optional

import httpx

from ..cancellation_parts.cancelled_error import CancelledError
from .client_error import ClientError
from .error_code import ErrorCode


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    val = getattr(exc, "status_code", None)
    if isinstance(val, int) and 100 <= val < 600:
        return val
    try:
        resp = getattr(exc, "response", None)
    except RuntimeError:
        # httpx raises when .response is read on an error without one.
        resp = None
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

# Unexpected end of stream while reading the response.
_EOF_ERRORS = (httpx.RemoteProtocolError, httpx.ReadError, EOFError)


def is_retryable_exception(exc: Optional[BaseException]) -> bool:
    """Return True if a transport-level error may be retried.

    Retryable:
      - timeouts (``httpx.TimeoutException``) and deadline exceeded (``TimeoutError``)
      - unexpected end of stream (``httpx.RemoteProtocolError``, ``httpx.ReadError``,
        ``EOFError``)

    Never retryable:
      - cooperative cancellation (``CancelledError``)
      - any other error
    """
    if exc is None:
        return False
    if isinstance(exc, CancelledError):
        return False
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return True
    return isinstance(exc, _EOF_ERRORS)


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ClientError passthrough.
        2. Cancellation.
        3. Timeout exceptions.
        4. Unexpected end of stream.
        5. HTTP status mapping.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ClientError):
        return exc.code
    if isinstance(exc, CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, _EOF_ERRORS):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    return ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "is_retryable_exception",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
