"""Unified configuration layer for the client.

Goals
-----
* Centralize defaults (base URL, timeout, retry bounds, cache directory).
* Merge sources in a predictable order:
    1. Built-in defaults (``ClientConfig`` field defaults)
    2. Optional external config file (JSON or YAML) pointed to by MISTRAL_CONFIG_FILE
    3. Environment variables (e.g. MISTRAL_API_KEY, MISTRAL_BASE_URL)
    4. In-code overrides passed to ``load_client_config``
* Validate everything once, at construction time, through ``ClientConfig``.

External Config File (Optional)
-------------------------------
If MISTRAL_CONFIG_FILE is set to a path, we attempt to load JSON first and
fall back to YAML. Either a flat mapping or a ``mistral:`` section is
accepted:

```
mistral:
  base_url: https://api.mistral.ai
  max_retries: 5
  retry_status_codes: [429, 503]
```

Public API
----------
* ClientConfig
* load_client_config(overrides: dict | None = None) -> ClientConfig
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import httpx
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .defaults import (
    BASE_API_URL,
    DEFAULT_CACHE_DIR,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_RETRY_WAIT_MAX_SECONDS,
    DEFAULT_RETRY_WAIT_MIN_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)
from .env import CONFIG_FILE_ENV, env_overrides, is_placeholder


class ClientConfig(BaseModel):
    """Validated settings consumed by the transport, limiter and cache layers.

    Attributes:
        api_key: Bearer token sent in the ``Authorization`` header.
        base_url: API root; a trailing slash is stripped.
        timeout_seconds: Per-request deadline enforced by the HTTP client.
        max_retries: Retries after the first attempt (total attempts = 1 + max_retries).
        retry_wait_min_seconds: Backoff floor. ``0`` selects the default.
        retry_wait_max_seconds: Backoff ceiling. ``0`` selects the default.
        retry_status_codes: HTTP statuses that trigger a retry. Empty selects the default set.
        verbose: Promote transport log events from DEBUG to INFO.
        cache_enabled: Wrap the client with the local filesystem cache.
        cache_dir: Directory used by the local cache engine.
        transport: Optional ``httpx.BaseTransport`` replacing the default network transport.
        rate_limiter: Optional object exposing ``wait(cancel_token=None)``.

    Raises:
        pydantic.ValidationError: On out-of-range or malformed values.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    api_key: str = ""
    base_url: str = BASE_API_URL
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_wait_min_seconds: float = Field(default=DEFAULT_RETRY_WAIT_MIN_SECONDS, ge=0)
    retry_wait_max_seconds: float = Field(default=DEFAULT_RETRY_WAIT_MAX_SECONDS, ge=0)
    retry_status_codes: Tuple[int, ...] = DEFAULT_RETRY_STATUS_CODES
    verbose: bool = False
    cache_enabled: bool = False
    cache_dir: str = DEFAULT_CACHE_DIR
    transport: Optional[httpx.BaseTransport] = None
    rate_limiter: Optional[Any] = None

    @model_validator(mode="before")
    @classmethod
    def _cache_dir_enables_cache(cls, data: Any) -> Any:
        """An explicit ``cache_dir`` turns caching on unless told otherwise."""
        if isinstance(data, dict) and data.get("cache_dir") and "cache_enabled" not in data:
            data = dict(data)
            data["cache_enabled"] = True
        return data

    @field_validator("api_key", mode="before")
    @classmethod
    def _drop_placeholder_key(cls, value: Any) -> Any:
        if value is None or is_placeholder(value):
            return ""
        return value

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url must be non-empty")
        return value.rstrip("/")

    @field_validator("retry_status_codes", mode="before")
    @classmethod
    def _default_status_codes(cls, value: Any) -> Any:
        if value is None or (isinstance(value, (list, tuple, set)) and len(value) == 0):
            return DEFAULT_RETRY_STATUS_CODES
        return tuple(value) if isinstance(value, (list, set)) else value

    @field_validator("retry_status_codes")
    @classmethod
    def _check_status_codes(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        for code in value:
            if not 100 <= code < 600:
                raise ValueError(f"invalid HTTP status code in retry_status_codes: {code}")
        return value

    @field_validator("rate_limiter")
    @classmethod
    def _check_rate_limiter(cls, value: Any) -> Any:
        if value is not None and not callable(getattr(value, "wait", None)):
            raise ValueError("rate_limiter must expose a wait() method")
        return value

    @model_validator(mode="after")
    def _normalize_backoff_bounds(self) -> "ClientConfig":
        """Apply defaults for zero bounds and keep ``wait_min <= wait_max``."""
        wait_min = self.retry_wait_min_seconds or DEFAULT_RETRY_WAIT_MIN_SECONDS
        wait_max = self.retry_wait_max_seconds or DEFAULT_RETRY_WAIT_MAX_SECONDS
        if wait_min > wait_max:
            wait_min, wait_max = wait_max, wait_min
        self.retry_wait_min_seconds = wait_min
        self.retry_wait_max_seconds = wait_max
        return self


def _load_external_config() -> Dict[str, Any]:
    """Read the optional config file named by ``MISTRAL_CONFIG_FILE``.

    Returns an empty mapping when the variable is unset, the file is missing,
    or the document is not a mapping.
    """
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        return {}
    section = data.get("mistral")
    return dict(section) if isinstance(section, dict) else data


def load_client_config(overrides: Optional[Dict[str, Any]] = None) -> ClientConfig:
    """Return a validated ``ClientConfig`` built from every configuration source.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored so callers can forward optional
    keyword arguments untouched.
    """
    cfg: Dict[str, Any] = {}
    cfg |= _load_external_config()
    cfg |= env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return ClientConfig(**cfg)


__all__ = [
    "ClientConfig",
    "load_client_config",
]
