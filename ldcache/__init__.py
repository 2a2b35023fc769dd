"""ldcache – bounds-checked reader for the dynamic linker's ld.so.cache."""

__version__ = "0.1.0"

from .format import (
    MAGIC_OLD, MAGIC_NEW,
    FLAG_ELF, FLAG_I386, FLAG_X86_64,
)
from .errors import (
    CacheError, CacheIOError, MagicMismatchError, TruncatedFileError,
    OutOfBoundsError, SizeMismatchError, MissingTerminatorError,
    StringOffsetOutOfBoundsError, UnterminatedStringError,
)
from .source import ByteRegion, load_region, resolve_cache_path
from .cursor import BoundsCursor
from .view import CacheEntry, CacheView, LegacyEntry, LegacyHeader, NewHeader
from .reader import parse, parse_file

__all__ = [
    "__version__",
    "MAGIC_OLD", "MAGIC_NEW", "FLAG_ELF", "FLAG_I386", "FLAG_X86_64",
    "CacheError", "CacheIOError", "MagicMismatchError", "TruncatedFileError",
    "OutOfBoundsError", "SizeMismatchError", "MissingTerminatorError",
    "StringOffsetOutOfBoundsError", "UnterminatedStringError",
    "ByteRegion", "load_region", "resolve_cache_path",
    "BoundsCursor",
    "CacheEntry", "CacheView", "LegacyEntry", "LegacyHeader", "NewHeader",
    "parse", "parse_file",
]
