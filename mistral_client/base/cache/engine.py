"""Cache storage contract.

An engine is a key/value byte store addressed by the request fingerprint.
``get`` signals a miss by raising :class:`CacheMiss`; any other exception is
treated by callers as a failure of the cache subsystem. ``set`` must be atomic
per key: a concurrent ``get`` sees either the old entry or the new one, never
a partial write.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


class CacheMiss(KeyError):
    """No entry stored under the requested key."""


@runtime_checkable
class CacheEngine(Protocol):
    def get(self, key: str) -> bytes: ...

    def set(self, key: str, data: bytes) -> None: ...


__all__ = ["CacheMiss", "CacheEngine"]
