"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `mistral_client.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .client_error import (
    CacheFailureError,
    ClientError,
    DecodeError,
    HttpStatusError,
    RetriesExhaustedError,
)
from .api_error import ApiError, ModelNotFoundError, format_api_error
from .classification import classify_exception, is_retryable_exception

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
