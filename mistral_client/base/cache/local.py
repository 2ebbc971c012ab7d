"""Local filesystem cache engine: one ``<key>.json`` file per entry."""
from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Union

from ..errors import CacheFailureError
from .engine import CacheMiss


class LocalFsEngine:
    """Store entries as files under ``cache_dir`` (created on construction).

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so readers never observe a partial entry.
    Concurrent writers of the same key resolve as last-write-wins.

    Raises:
        CacheFailureError: The cache directory cannot be created.
    """

    def __init__(self, cache_dir: Union[str, os.PathLike]) -> None:
        self.cache_dir = Path(cache_dir)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheFailureError("cache dir creation failed", e) from e

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"invalid cache key: {key!r}")
        return self.cache_dir / f"{key}.json"

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise CacheMiss(key) from e

    def set(self, key: str, data: bytes) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.cache_dir)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise


__all__ = ["LocalFsEngine"]
