"""Shared ``httpx.Client`` construction.

Purpose:
    Build the synchronous ``httpx.Client`` used by the retrying transport from
    a validated :class:`~mistral_client.config.ClientConfig`. Timeouts derive
    from ``timeout_seconds``; no numeric literals are introduced here.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Transport injection:
    - ``ClientConfig.transport`` (any ``httpx.BaseTransport``) replaces the
      network transport, which is how tests plug in ``httpx.MockTransport``.
"""

from __future__ import annotations

from typing import Dict

import httpx

from ...config import ClientConfig

_CONTENT_TYPE = "application/json; charset=utf-8"


def default_headers(api_key: str) -> Dict[str, str]:
    """Headers sent with every request (bearer auth + JSON content type)."""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": _CONTENT_TYPE,
    }


def create_httpx_client(config: ClientConfig) -> httpx.Client:
    """Return a new ``httpx.Client`` bound to ``config.base_url``.

    The caller owns the client and must ``close()`` it.
    """
    kwargs = {
        "base_url": config.base_url,
        "timeout": httpx.Timeout(config.timeout_seconds),
        "headers": default_headers(config.api_key),
    }
    if config.transport is not None:
        kwargs["transport"] = config.transport
    return httpx.Client(**kwargs)


__all__ = ["create_httpx_client", "default_headers"]
