"""Request fingerprinting for cache keys."""
from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping

from ..errors import CacheFailureError


def canonical_json(payload: Mapping[str, Any]) -> str:
    """Serialize with sorted keys and no insignificant whitespace."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_hash_key(request: Any) -> str:
    """Return the hex SHA-256 of the request's canonical JSON.

    ``request`` is a mapping or an object exposing ``to_dict()``. Key order
    does not affect the result; any value change does.

    Raises:
        CacheFailureError: ``request`` is ``None``.
    """
    if request is None:
        raise CacheFailureError("request cannot be None")
    payload = request if isinstance(request, Mapping) else request.to_dict()
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


__all__ = ["canonical_json", "compute_hash_key"]
