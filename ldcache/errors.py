"""Exceptions raised while loading and parsing ld.so.cache."""


class CacheError(Exception):
    """Base exception for ld.so.cache load / parse errors."""

    kind = "CacheError"


class CacheIOError(CacheError):
    """The cache file could not be read."""

    kind = "IOFailure"


class MagicMismatchError(CacheError):
    """Legacy or new header magic does not match."""

    kind = "MagicMismatch"


class TruncatedFileError(CacheError):
    """A header, entry array, padding or string payload runs past the end."""

    kind = "TruncatedFile"


class OutOfBoundsError(TruncatedFileError):
    """A cursor advance was rejected before any byte was read."""


class SizeMismatchError(CacheError):
    """Declared sizes do not add up to the file length."""

    kind = "OverreadOrUnderread"


class MissingTerminatorError(CacheError):
    """The last byte of the string table is not NUL."""

    kind = "MissingTerminator"


class StringOffsetOutOfBoundsError(CacheError):
    """An entry's key or value offset points outside the string table."""

    kind = "StringOffsetOutOfBounds"


class UnterminatedStringError(CacheError):
    """A string runs to the end of the table without a NUL."""

    kind = "UnterminatedString"
