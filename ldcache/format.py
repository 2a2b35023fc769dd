"""ld.so.cache binary layout: magics, structs, numpy record dtypes, flags."""

import struct

import numpy as np

# ── Magic ───────────────────────────────────────────────────────────────────

MAGIC_OLD = b"ld.so-1.7.0"             # legacy container, no NUL stored
MAGIC_NEW = b"glibc-ld.so.cache1.1"    # overlay embedded in the legacy strtab

# ── Struct formats (little-endian, C ABI padding spelled out) ──────────────
#
# Legacy header (16 B):
#   magic[11] pad[1] nlibs(u32)
# Legacy entry (12 B):
#   flags(i32) key(u32) value(u32)
# New header (48 B):
#   magic[20] nlibs(u32) stringslen(u32) unused[20]
# New entry (24 B):
#   flags(i16) pad[2] key(u32) value(u32) osversion(u32) hwcap(u64)

OLD_HEADER_FMT = "<11sxI"
OLD_ENTRY_FMT = "<iII"
NEW_HEADER_FMT = "<20sII20s"
NEW_ENTRY_FMT = "<h2xIIIQ"

OLD_HEADER_SIZE = 16
OLD_ENTRY_SIZE = 12
NEW_HEADER_SIZE = 48
NEW_ENTRY_SIZE = 24

assert struct.calcsize(OLD_HEADER_FMT) == OLD_HEADER_SIZE
assert struct.calcsize(OLD_ENTRY_FMT) == OLD_ENTRY_SIZE
assert struct.calcsize(NEW_HEADER_FMT) == NEW_HEADER_SIZE
assert struct.calcsize(NEW_ENTRY_FMT) == NEW_ENTRY_SIZE

# The new header must start on this boundary inside the legacy string table.
NEW_HEADER_ALIGN = 8

# ── Record dtypes (entry arrays are decoded in one frombuffer call) ────────

OLD_ENTRY_DTYPE = np.dtype(
    {
        "names": ["flags", "key", "value"],
        "formats": ["<i4", "<u4", "<u4"],
        "offsets": [0, 4, 8],
        "itemsize": OLD_ENTRY_SIZE,
    }
)

NEW_ENTRY_DTYPE = np.dtype(
    {
        "names": ["flags", "key", "value", "osversion", "hwcap"],
        "formats": ["<i2", "<u4", "<u4", "<u4", "<u8"],
        "offsets": [0, 4, 8, 12, 16],
        "itemsize": NEW_ENTRY_SIZE,
    }
)

assert OLD_ENTRY_DTYPE.itemsize == struct.calcsize(OLD_ENTRY_FMT)
assert NEW_ENTRY_DTYPE.itemsize == struct.calcsize(NEW_ENTRY_FMT)

# ── Entry flags (passed through untouched) ─────────────────────────────────

FLAG_ELF = 0x0001
FLAG_I386 = 0x0800
FLAG_X86_64 = 0x0300

FLAG_LABELS: list[tuple[str, int]] = [
    ("elf", FLAG_ELF),
    ("x86-64", FLAG_X86_64),
    ("i386", FLAG_I386),
]


def align(offset: int, alignment: int) -> int:
    """Round *offset* up to the next multiple of *alignment*."""
    return (offset + alignment - 1) // alignment * alignment


def padding_for(offset: int, alignment: int) -> int:
    """Bytes needed after *offset* to reach the next *alignment* boundary."""
    return align(offset, alignment) - offset


def describe_flags(flags: int) -> str:
    """Comma-joined labels for the known flag patterns set in *flags*."""
    return ",".join(name for name, bits in FLAG_LABELS if flags & bits == bits)
