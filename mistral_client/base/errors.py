"""Unified client error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``mistral_client.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.client_error import (
    CacheFailureError,
    ClientError,
    DecodeError,
    HttpStatusError,
    RetriesExhaustedError,
)
from .errors_parts.api_error import ApiError, ModelNotFoundError, format_api_error
from .errors_parts.classification import classify_exception, is_retryable_exception

__all__ = [
    "ErrorCode",
    "ClientError",
    "ApiError",
    "ModelNotFoundError",
    "HttpStatusError",
    "RetriesExhaustedError",
    "DecodeError",
    "CacheFailureError",
    "format_api_error",
    "classify_exception",
    "is_retryable_exception",
]
