"""
mistral_client: Python client for the Mistral chat, embedding and model APIs.

Typical use::

    from mistral_client import ChatCompletionRequest, UserMessage, new_client

    client = new_client(api_key="...")
    resp = client.chat_completion(
        ChatCompletionRequest("mistral-small-latest", [UserMessage("Hello")])
    )
    print(resp.assistant_message().content)
"""

from .base.cache import CacheEngine, CacheMiss, CachedClient, CachedData, LocalFsEngine, new_cached
from .base.cancellation import CancellationToken, CancelledError
from .base.errors import (
    ApiError,
    CacheFailureError,
    ClientError,
    DecodeError,
    ErrorCode,
    HttpStatusError,
    ModelNotFoundError,
    RetriesExhaustedError,
)
from .base.interfaces import Client
from .base.logging import configure_logger, get_logger
from .base.models import *  # noqa: F401,F403
from .base.models import __all__ as _models_all
from .base.resilience import NoneRateLimiter, RateLimiter, RetryConfig, TokenBucketRateLimiter
from .base.streaming import ChunkStream
from .client import MistralClient, new_client
from .config import ClientConfig, load_client_config

__all__ = [
    "Client",
    "MistralClient",
    "new_client",
    "new_cached",
    "ClientConfig",
    "load_client_config",
    "CacheEngine",
    "CacheMiss",
    "CachedClient",
    "CachedData",
    "LocalFsEngine",
    "CancellationToken",
    "CancelledError",
    "ErrorCode",
    "ClientError",
    "ApiError",
    "ModelNotFoundError",
    "HttpStatusError",
    "RetriesExhaustedError",
    "DecodeError",
    "CacheFailureError",
    "ChunkStream",
    "RetryConfig",
    "RateLimiter",
    "TokenBucketRateLimiter",
    "NoneRateLimiter",
    "configure_logger",
    "get_logger",
    *_models_all,
]
