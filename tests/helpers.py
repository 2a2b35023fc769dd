"""Builders for synthetic ld.so.cache images used across the test modules."""

from __future__ import annotations

import struct
from typing import Optional, Sequence

from ldcache.format import (
    MAGIC_NEW,
    MAGIC_OLD,
    NEW_ENTRY_FMT,
    NEW_ENTRY_SIZE,
    NEW_HEADER_ALIGN,
    NEW_HEADER_FMT,
    NEW_HEADER_SIZE,
    OLD_ENTRY_FMT,
    OLD_ENTRY_SIZE,
    OLD_HEADER_FMT,
    OLD_HEADER_SIZE,
    align,
)


def new_header_offset(n_legacy: int) -> int:
    return align(OLD_HEADER_SIZE + n_legacy * OLD_ENTRY_SIZE, NEW_HEADER_ALIGN)


def strings_base(n_new: int) -> int:
    """Offset of the string payload relative to the new header."""
    return NEW_HEADER_SIZE + n_new * NEW_ENTRY_SIZE


def build_cache(
    entries: Sequence[tuple[int, int, int, int, int]] = (),
    strings: bytes = b"",
    legacy: Sequence[tuple[int, int, int]] = (),
    *,
    old_magic: bytes = MAGIC_OLD,
    new_magic: bytes = MAGIC_NEW,
    nlibs_old: Optional[int] = None,
    nlibs_new: Optional[int] = None,
    stringslen: Optional[int] = None,
    pad: bytes = b"\x00",
) -> bytes:
    """Assemble a cache image.

    *entries* are ``(flags, key, value, osversion, hwcap)`` with offsets
    relative to the new header; *legacy* are ``(flags, key, value)``.
    Header counts default to the actual list lengths.
    """
    out = bytearray()
    out += struct.pack(
        OLD_HEADER_FMT, old_magic,
        len(legacy) if nlibs_old is None else nlibs_old,
    )
    for e in legacy:
        out += struct.pack(OLD_ENTRY_FMT, *e)
    out += pad * (align(len(out), NEW_HEADER_ALIGN) - len(out))

    out += struct.pack(
        NEW_HEADER_FMT, new_magic,
        len(entries) if nlibs_new is None else nlibs_new,
        len(strings) if stringslen is None else stringslen,
        b"\x00" * 20,
    )
    for e in entries:
        out += struct.pack(NEW_ENTRY_FMT, *e)
    out += strings
    return bytes(out)


def build_from_pairs(
    pairs: Sequence[tuple[str, str]],
    flags: int = 0x0303,
    legacy: Sequence[tuple[int, int, int]] = (),
) -> bytes:
    """Cache mapping each ``(key, value)`` pair, strings laid out in order."""
    base = strings_base(len(pairs))
    strings = bytearray()
    entries = []
    for i, (key, value) in enumerate(pairs):
        key_off = base + len(strings)
        strings += key.encode() + b"\x00"
        value_off = base + len(strings)
        strings += value.encode() + b"\x00"
        entries.append((flags, key_off, value_off, i, 1 << i))
    return build_cache(entries, bytes(strings), legacy)


def sample_cache() -> bytes:
    """Three libraries and one legacy entry (forces 4 bytes of padding)."""
    return build_from_pairs(
        [
            ("libc.so.6", "/lib/x86_64-linux-gnu/libc.so.6"),
            ("libm.so.6", "/lib/x86_64-linux-gnu/libm.so.6"),
            ("libc.so.6", "/lib32/libc.so.6"),
        ],
        legacy=[(1, 0, 10)],
    )
