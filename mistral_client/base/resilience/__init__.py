"""Retry policy and rate limiting primitives."""

from .retry import RetryConfig, DEFAULT_RETRY_CONFIG
from .limiter import NoneRateLimiter, RateLimiter, TokenBucketRateLimiter

__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "RateLimiter",
    "TokenBucketRateLimiter",
    "NoneRateLimiter",
]
