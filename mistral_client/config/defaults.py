"""mistral_client.config.defaults
==============================

Central place for small, stable default values used across the client. These
defaults can be overridden via environment variables, an external config file
or explicit overrides, but provide sensible fallbacks for local development
and tests.

This module intentionally avoids importing from other packages of the client
to prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- API endpoint ----
BASE_API_URL = "https://api.mistral.ai"

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
EMBEDDINGS_PATH = "/v1/embeddings"
MODELS_PATH = "/v1/models"

# ---- HTTP ----
DEFAULT_TIMEOUT_SECONDS = 30.0

# ---- Retry policy ----
# Number of retries after the first attempt.
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_WAIT_MIN_SECONDS = 0.2
DEFAULT_RETRY_WAIT_MAX_SECONDS = 1.0
DEFAULT_RETRY_STATUS_CODES = (429, 500, 502, 503, 504)

# ---- Cache ----
DEFAULT_CACHE_DIR = "./.mistral/cache"

# ---- Streaming ----
SSE_DATA_PREFIX = "data: "
SSE_DONE_SENTINEL = "[DONE]"


__all__ = [
    "BASE_API_URL",
    "CHAT_COMPLETIONS_PATH",
    "EMBEDDINGS_PATH",
    "MODELS_PATH",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_WAIT_MIN_SECONDS",
    "DEFAULT_RETRY_WAIT_MAX_SECONDS",
    "DEFAULT_RETRY_STATUS_CODES",
    "DEFAULT_CACHE_DIR",
    "SSE_DATA_PREFIX",
    "SSE_DONE_SENTINEL",
]
