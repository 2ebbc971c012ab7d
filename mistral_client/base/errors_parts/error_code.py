"""
Failure categories carried by every ``ClientError``.

Values are lowercase snake_case; they appear as ``error_code`` in log events
and callers may branch on them instead of matching message text.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Normalized failure category."""

    # answered by the API
    AUTH = "auth"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"

    # transport
    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    CANCELLED = "cancelled"
    RETRIES_EXHAUSTED = "retries_exhausted"

    # local
    DECODE = "decode"
    CACHE_FAILURE = "cache_failure"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
