"""Validated, read-only result of parsing an ld.so.cache file."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterator, Optional

from .source import ByteRegion


# ── Records ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LegacyHeader:
    magic: bytes
    nlibs: int

    @property
    def magic_text(self) -> str:
        return self.magic.decode("ascii", "replace")


@dataclass(frozen=True)
class LegacyEntry:
    """Raw legacy entry; offsets are relative to the legacy string table."""

    flags: int
    key: int
    value: int


@dataclass(frozen=True)
class NewHeader:
    magic: bytes
    nlibs: int
    stringslen: int
    offset: int          # absolute; also the new string table origin

    @property
    def magic_text(self) -> str:
        return self.magic.decode("ascii", "replace")


@dataclass(frozen=True)
class CacheEntry:
    """One new-format entry with both strings resolved."""

    flags: int
    key: str
    value: str
    osversion: int
    hwcap: int
    key_offset: int
    value_offset: int


# ── CacheView ───────────────────────────────────────────────────────────────


class CacheView:
    """Fully validated cache contents.

    Built only by :func:`ldcache.reader.parse`; every check has already run,
    so none of the accessors below can fail on account of the file.

    Usage::

        view = parse_file()
        for e in view:
            print(e.key, "=>", e.value)
        view.find("libc.so.6")
    """

    def __init__(
        self,
        region: ByteRegion,
        legacy_header: LegacyHeader,
        legacy_entries: tuple[LegacyEntry, ...],
        new_header: NewHeader,
        entries: tuple[CacheEntry, ...],
    ) -> None:
        self._region = region
        self._legacy_header = legacy_header
        self._legacy_entries = legacy_entries
        self._new_header = new_header
        self._entries = entries
        self._by_key: Optional[dict[str, list[CacheEntry]]] = None

    # ── Headers ──────────────────────────────────────────────────────────

    @property
    def region(self) -> ByteRegion:
        return self._region

    @property
    def legacy_header(self) -> LegacyHeader:
        return self._legacy_header

    @property
    def legacy_entries(self) -> tuple[LegacyEntry, ...]:
        return self._legacy_entries

    @property
    def new_header(self) -> NewHeader:
        return self._new_header

    @property
    def string_table_offset(self) -> int:
        return self._new_header.offset

    # ── Entries ──────────────────────────────────────────────────────────

    def entry_count(self) -> int:
        return len(self._entries)

    def entry(self, index: int) -> CacheEntry:
        if not 0 <= index < len(self._entries):
            raise IndexError(
                f"entry index {index} out of range (0..{len(self._entries) - 1})"
            )
        return self._entries[index]

    @property
    def entries(self) -> tuple[CacheEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> CacheEntry:
        return self._entries[index]

    # ── Lookup ───────────────────────────────────────────────────────────

    def find(self, name: str) -> list[CacheEntry]:
        """All entries keyed *name*, in cache order (first one wins at load)."""
        if self._by_key is None:
            by_key: dict[str, list[CacheEntry]] = {}
            for e in self._entries:
                by_key.setdefault(e.key, []).append(e)
            self._by_key = by_key
        return list(self._by_key.get(name, ()))

    def keys(self) -> list[str]:
        """Distinct library names, first-seen order."""
        return list(dict.fromkeys(e.key for e in self._entries))

    # ── Export ───────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "legacy": {
                "magic": self._legacy_header.magic_text,
                "nlibs": self._legacy_header.nlibs,
            },
            "new": {
                "magic": self._new_header.magic_text,
                "nlibs": self._new_header.nlibs,
                "stringslen": self._new_header.stringslen,
                "offset": self._new_header.offset,
            },
            "entries": [asdict(e) for e in self._entries],
        }

    def __repr__(self) -> str:
        return (
            f"CacheView({self._region!r}, legacy={self._legacy_header.nlibs}, "
            f"entries={len(self._entries)})"
        )
