"""ld.so.cache reader – locate, validate, and decode both cache formats.

The file is a legacy ``ld.so-1.7.0`` container whose string table begins
with an 8-byte aligned ``glibc-ld.so.cache1.1`` header::

    legacy header | legacy entries[n_old] | pad | new header |
    new entries[n_new] | strings ...

New-format string offsets are relative to the new header's start.  Parsing
is a straight pipeline over one :class:`BoundsCursor`; the first failed
check raises and nothing partial escapes.
"""

from __future__ import annotations

import os
import struct
from typing import Optional, Union

import numpy as np

from .cursor import BoundsCursor
from .errors import (
    MagicMismatchError,
    MissingTerminatorError,
    SizeMismatchError,
    StringOffsetOutOfBoundsError,
    UnterminatedStringError,
)
from .format import (
    MAGIC_OLD,
    MAGIC_NEW,
    OLD_HEADER_FMT,
    OLD_HEADER_SIZE,
    OLD_ENTRY_SIZE,
    OLD_ENTRY_DTYPE,
    NEW_HEADER_FMT,
    NEW_HEADER_SIZE,
    NEW_ENTRY_SIZE,
    NEW_ENTRY_DTYPE,
    NEW_HEADER_ALIGN,
)
from .source import ByteRegion, load_region
from .view import CacheEntry, CacheView, LegacyEntry, LegacyHeader, NewHeader


# ── Legacy format ───────────────────────────────────────────────────────────


def _records(raw: memoryview, dtype: np.dtype, count: int) -> np.ndarray:
    if count == 0:
        return np.zeros(0, dtype=dtype)
    return np.frombuffer(raw, dtype=dtype, count=count)


def read_legacy(
    cursor: BoundsCursor,
) -> tuple[LegacyHeader, tuple[LegacyEntry, ...]]:
    """Read the legacy header and entry array.

    Leaves *cursor* at the legacy string table origin, which is also where
    the search for the embedded new header starts.
    """
    raw = cursor.advance(OLD_HEADER_SIZE, "legacy header")
    magic, nlibs = struct.unpack(OLD_HEADER_FMT, raw)
    if magic != MAGIC_OLD:
        raise MagicMismatchError(
            f"bad legacy magic {magic!r} (expected {MAGIC_OLD!r})"
        )

    # nlibs comes straight from the file; int math keeps the product exact.
    raw = cursor.advance(nlibs * OLD_ENTRY_SIZE, f"legacy entries ({nlibs})")
    arr = _records(raw, OLD_ENTRY_DTYPE, nlibs)
    entries = tuple(
        LegacyEntry(flags=int(f), key=int(k), value=int(v))
        for f, k, v in zip(arr["flags"], arr["key"], arr["value"])
    )
    return LegacyHeader(magic=magic, nlibs=nlibs), entries


# ── Overlay ─────────────────────────────────────────────────────────────────


def locate_overlay(cursor: BoundsCursor) -> int:
    """Align *cursor* onto the new header and confirm its magic.

    Returns the absolute offset of the new header, which is the origin of
    the new string table.  A file without the overlay is rejected rather
    than read as legacy-only.
    """
    cursor.align_to(NEW_HEADER_ALIGN, "padding before new header")
    magic = bytes(cursor.peek(len(MAGIC_NEW), "new header magic"))
    if magic != MAGIC_NEW:
        raise MagicMismatchError(
            f"bad new-format magic {magic!r} at offset {cursor.position} "
            f"(expected {MAGIC_NEW!r})"
        )
    return cursor.position


# ── New format ──────────────────────────────────────────────────────────────


def read_new(cursor: BoundsCursor) -> tuple[NewHeader, np.ndarray]:
    """Read the new header, its entries, and skip over the string payload.

    The returned record array still holds raw string offsets; they are
    checked by :func:`validate_string_table`.
    """
    origin = cursor.position
    raw = cursor.advance(NEW_HEADER_SIZE, "new header")
    magic, nlibs, stringslen, _unused = struct.unpack(NEW_HEADER_FMT, raw)

    raw = cursor.advance(nlibs * NEW_ENTRY_SIZE, f"new entries ({nlibs})")
    arr = _records(raw, NEW_ENTRY_DTYPE, nlibs)

    cursor.advance(stringslen, f"string table ({stringslen} bytes)")
    header = NewHeader(
        magic=magic, nlibs=nlibs, stringslen=stringslen, offset=origin,
    )
    return header, arr


# ── String table ────────────────────────────────────────────────────────────


def validate_string_table(
    cursor: BoundsCursor,
    origin: int,
    arr: np.ndarray,
) -> tuple[CacheEntry, ...]:
    """Check the table ends the file, is NUL-terminated, and that every
    entry's offsets land on terminated strings inside it.

    Returns the entries with both strings resolved.
    """
    region = cursor.region
    end = cursor.position
    if end != len(region):
        raise SizeMismatchError(
            f"declared sizes end at offset {end} but file is "
            f"{len(region)} bytes"
        )
    if region.data[end - 1] != 0:
        raise MissingTerminatorError(
            f"last byte of string table is 0x{region.data[end - 1]:02x}, not NUL"
        )

    limit = end - origin
    for field in ("key", "value"):
        offs = arr[field].astype(np.uint64)
        bad = np.flatnonzero(offs >= limit)
        if bad.size:
            i = int(bad[0])
            raise StringOffsetOutOfBoundsError(
                f"entry {i} {field} offset {int(offs[i])} outside string "
                f"table of {limit} bytes at offset {origin}"
            )

    entries = []
    for i, rec in enumerate(arr):
        key_off = int(rec["key"])
        value_off = int(rec["value"])
        entries.append(
            CacheEntry(
                flags=int(rec["flags"]),
                key=_resolve(region, origin, key_off, end, i, "key"),
                value=_resolve(region, origin, value_off, end, i, "value"),
                osversion=int(rec["osversion"]),
                hwcap=int(rec["hwcap"]),
                key_offset=key_off,
                value_offset=value_off,
            )
        )
    return tuple(entries)


def _resolve(
    region: ByteRegion, origin: int, offset: int, end: int, index: int, field: str,
) -> str:
    start = origin + offset
    nul = region.find_nul(start, end)
    if nul < 0:
        raise UnterminatedStringError(
            f"entry {index} {field} at offset {start} has no NUL before {end}"
        )
    return os.fsdecode(region.data[start:nul])


# ── Entry points ────────────────────────────────────────────────────────────


def parse(data: Union[ByteRegion, bytes, bytearray, memoryview]) -> CacheView:
    """Parse an in-memory cache image into a :class:`CacheView`."""
    region = data if isinstance(data, ByteRegion) else ByteRegion(data)
    cursor = BoundsCursor(region)
    legacy_header, legacy_entries = read_legacy(cursor)
    origin = locate_overlay(cursor)
    new_header, arr = read_new(cursor)
    entries = validate_string_table(cursor, origin, arr)
    return CacheView(region, legacy_header, legacy_entries, new_header, entries)


def parse_file(path: Optional[str] = None) -> CacheView:
    """Load and parse the cache at *path* (default: the system cache)."""
    return parse(load_region(path))
