"""mistral_client.config.env
=========================

Environment variable mapping and helpers for client settings.

Purpose
-------
- Provide a single source of truth mapping ``ClientConfig`` field names to
  their environment variable names.
- Offer small utilities to read those variables, ignoring placeholder values
  left over from templates (``.env.example`` and friends).

Failure Modes
-------------
- Helpers never raise on unset variables; they return ``None`` or an empty
  mapping and the caller decides how to proceed. Type coercion is left to
  ``ClientConfig`` validation.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

ENV_PREFIX = "MISTRAL_"

# ClientConfig field -> environment variable suffix
ENV_FIELD_MAP: Dict[str, str] = {
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
    "timeout_seconds": "TIMEOUT_SECONDS",
    "max_retries": "MAX_RETRIES",
    "retry_wait_min_seconds": "RETRY_WAIT_MIN_SECONDS",
    "retry_wait_max_seconds": "RETRY_WAIT_MAX_SECONDS",
    "retry_status_codes": "RETRY_STATUS_CODES",
    "verbose": "VERBOSE",
    "cache_dir": "CACHE_DIR",
}

CONFIG_FILE_ENV = "MISTRAL_CONFIG_FILE"


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_env_var_name(field: str) -> Optional[str]:
    """Return the environment variable name backing a config field."""
    suffix = ENV_FIELD_MAP.get(field)
    return f"{ENV_PREFIX}{suffix}" if suffix else None


def env_overrides() -> Dict[str, Any]:
    """Collect raw config values from the process environment.

    ``retry_status_codes`` is split on commas; every other value is returned as
    the raw string. Empty strings and placeholder values are skipped.
    """
    out: Dict[str, Any] = {}
    for field in ENV_FIELD_MAP:
        name = get_env_var_name(field)
        raw = os.environ.get(name) if name else None
        if raw is None or not raw.strip() or is_placeholder(raw):
            continue
        if field == "retry_status_codes":
            out[field] = [p.strip() for p in raw.split(",") if p.strip()]
        else:
            out[field] = raw.strip()
    return out


__all__ = [
    "ENV_PREFIX",
    "ENV_FIELD_MAP",
    "CONFIG_FILE_ENV",
    "is_placeholder",
    "get_env_var_name",
    "env_overrides",
]
