"""
Arbitrary JSON object helpers.

Tool-call arguments arrive either as a JSON object or as a JSON-encoded string
holding an object. ``decode_json_map`` normalizes both into a plain ``dict``.
"""
from __future__ import annotations

import json
from typing import Any, Dict


JsonMap = Dict[str, Any]


def decode_json_map(value: Any) -> JsonMap:
    """Return ``value`` as a JSON object mapping.

    Accepts a mapping, a JSON string encoding an object, or ``None``/``""``
    (empty mapping). Anything else raises ``ValueError``.
    """
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, (str, bytes, bytearray)):
        if not value:
            return {}
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"arguments are not valid JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise ValueError("arguments JSON must encode an object")
        return decoded
    raise ValueError(f"unsupported arguments type: {type(value).__name__}")


__all__ = ["JsonMap", "decode_json_map"]
