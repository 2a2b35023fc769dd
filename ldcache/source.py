"""Load a cache file into an immutable, length-known byte region."""

from __future__ import annotations

import os
from typing import Optional, Union

from .errors import CacheIOError


# ── Configuration ───────────────────────────────────────────────────────────

DEFAULT_CACHE_PATH = "/etc/ld.so.cache"
CACHE_PATH_ENV = "LDCACHE_PATH"


def resolve_cache_path(path: Optional[str] = None) -> str:
    """Explicit *path*, else ``$LDCACHE_PATH``, else the system cache."""
    if path:
        return path
    return os.environ.get(CACHE_PATH_ENV, "").strip() or DEFAULT_CACHE_PATH


# ── ByteRegion ──────────────────────────────────────────────────────────────


class ByteRegion:
    """Owned, read-only copy of a whole file.

    The bytes are copied once on construction; nothing hands out a mutable
    alias afterwards, so every view derived from the region stays valid for
    as long as the region itself.
    """

    __slots__ = ("_data", "_path")

    def __init__(
        self,
        data: Union[bytes, bytearray, memoryview],
        path: Optional[str] = None,
    ) -> None:
        self._data = bytes(data)
        self._path = path

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def view(self) -> memoryview:
        return memoryview(self._data)

    def find_nul(self, start: int, end: int) -> int:
        """Index of the first NUL in ``[start, end)``, or -1."""
        return self._data.find(b"\x00", start, end)

    def __repr__(self) -> str:
        where = self._path if self._path is not None else "<memory>"
        return f"ByteRegion({where!r}, {len(self._data)} bytes)"


def load_region(path: Optional[str] = None) -> ByteRegion:
    """Read the entire file at *path* (see :func:`resolve_cache_path`)."""
    path = resolve_cache_path(path)
    try:
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            data = f.read()
    except OSError as exc:
        raise CacheIOError(f"cannot read {path!r}: {exc.strerror or exc}") from exc
    if len(data) != size:
        raise CacheIOError(
            f"short read from {path!r}: got {len(data)} of {size} bytes"
        )
    return ByteRegion(data, path=path)
