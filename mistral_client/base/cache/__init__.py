"""Response cache: storage engines, fingerprinting and the client decorator."""

from .engine import CacheEngine, CacheMiss
from .local import LocalFsEngine
from .keys import canonical_json, compute_hash_key
from .cached_data import CachedData
from .cached_client import CachedClient, cached_call, new_cached

__all__ = [
    "CacheEngine",
    "CacheMiss",
    "LocalFsEngine",
    "canonical_json",
    "compute_hash_key",
    "CachedData",
    "CachedClient",
    "cached_call",
    "new_cached",
]
