"""BoundsCursor and ByteRegion tests."""

import pytest

from ldcache.cursor import BoundsCursor
from ldcache.errors import CacheIOError, OutOfBoundsError, TruncatedFileError
from ldcache.source import (
    CACHE_PATH_ENV,
    DEFAULT_CACHE_PATH,
    ByteRegion,
    load_region,
    resolve_cache_path,
)


# ── ByteRegion ──────────────────────────────────────────────────────────────


def test_region_copies_input():
    buf = bytearray(b"abc\x00")
    region = ByteRegion(buf)
    buf[0] = ord("z")
    assert region.data == b"abc\x00"
    assert len(region) == 4
    assert region.find_nul(0, 4) == 3
    assert region.find_nul(0, 3) == -1


def test_load_region(tmp_path):
    path = tmp_path / "cache"
    path.write_bytes(b"\x01\x02\x03")
    region = load_region(str(path))
    assert region.data == b"\x01\x02\x03"
    assert region.path == str(path)


def test_load_region_missing(tmp_path):
    with pytest.raises(CacheIOError, match="cannot read"):
        load_region(str(tmp_path / "nope"))


def test_resolve_cache_path(monkeypatch):
    monkeypatch.delenv(CACHE_PATH_ENV, raising=False)
    assert resolve_cache_path() == DEFAULT_CACHE_PATH
    monkeypatch.setenv(CACHE_PATH_ENV, "/tmp/other.cache")
    assert resolve_cache_path() == "/tmp/other.cache"
    assert resolve_cache_path("/explicit") == "/explicit"


# ── BoundsCursor ────────────────────────────────────────────────────────────


def test_advance_and_position():
    cur = BoundsCursor(ByteRegion(b"0123456789"))
    assert bytes(cur.advance(3)) == b"012"
    assert cur.position == 3
    assert bytes(cur.advance(0)) == b""
    assert bytes(cur.advance(7)) == b"3456789"
    assert cur.remaining == 0


def test_advance_past_end_leaves_position():
    cur = BoundsCursor(ByteRegion(b"0123"))
    cur.advance(2)
    with pytest.raises(OutOfBoundsError, match="need 3 bytes at offset 2"):
        cur.advance(3, "thing")
    assert cur.position == 2


def test_out_of_bounds_is_truncation():
    cur = BoundsCursor(ByteRegion(b""))
    with pytest.raises(TruncatedFileError):
        cur.advance(1)


def test_negative_advance_rejected():
    cur = BoundsCursor(ByteRegion(b"0123"))
    with pytest.raises(OutOfBoundsError, match="negative"):
        cur.advance(-1)


def test_huge_advance_rejected():
    cur = BoundsCursor(ByteRegion(b"0123"))
    with pytest.raises(OutOfBoundsError):
        cur.advance(0xFFFFFFFF * 24)


def test_peek_does_not_move():
    cur = BoundsCursor(ByteRegion(b"abcdef"))
    cur.advance(1)
    assert bytes(cur.peek(2)) == b"bc"
    assert cur.position == 1
    with pytest.raises(OutOfBoundsError):
        cur.peek(6)


@pytest.mark.parametrize("start,pad", [(0, 0), (1, 7), (7, 1), (8, 0), (12, 4)])
def test_align_to(start, pad):
    cur = BoundsCursor(ByteRegion(bytes(32)), start)
    assert cur.align_to(8) == pad
    assert cur.position == start + pad
    assert cur.position % 8 == 0


def test_align_past_end():
    cur = BoundsCursor(ByteRegion(bytes(13)))
    cur.advance(13)
    with pytest.raises(OutOfBoundsError, match="padding"):
        cur.align_to(8, "padding")


def test_align_exactly_to_end():
    cur = BoundsCursor(ByteRegion(bytes(16)), 13)
    assert cur.align_to(8) == 3
    assert cur.remaining == 0


def test_bad_start_position():
    with pytest.raises(OutOfBoundsError):
        BoundsCursor(ByteRegion(b"ab"), 3)
