"""Forward-only cursor that refuses to leave its byte region."""

from __future__ import annotations

from .errors import OutOfBoundsError
from .format import padding_for
from .source import ByteRegion


class BoundsCursor:
    """Absolute position over a :class:`ByteRegion`.

    Every read goes through :meth:`advance`, which checks the requested
    range against the region length before slicing, so no caller ever
    interprets bytes it has not been granted.

    Usage::

        cur = BoundsCursor(region)
        raw = cur.advance(16, "legacy header")
        cur.align_to(8, "overlay padding")
    """

    __slots__ = ("_region", "_view", "_pos")

    def __init__(self, region: ByteRegion, position: int = 0) -> None:
        if position < 0 or position > len(region):
            raise OutOfBoundsError(
                f"start position {position} outside region of {len(region)} bytes"
            )
        self._region = region
        self._view = region.view()
        self._pos = position

    @property
    def region(self) -> ByteRegion:
        return self._region

    @property
    def position(self) -> int:
        return self._pos

    @property
    def length(self) -> int:
        return len(self._region)

    @property
    def remaining(self) -> int:
        return len(self._region) - self._pos

    def _check(self, n: int, what: str) -> None:
        if n < 0:
            raise OutOfBoundsError(f"{what}: negative length {n} at offset {self._pos}")
        if self._pos + n > len(self._region):
            raise OutOfBoundsError(
                f"{what}: need {n} bytes at offset {self._pos}, "
                f"only {self.remaining} available"
            )

    def advance(self, n: int, what: str = "read") -> memoryview:
        """Return ``[position, position + n)`` and move past it."""
        self._check(n, what)
        start = self._pos
        self._pos += n
        return self._view[start : self._pos]

    def peek(self, n: int, what: str = "peek") -> memoryview:
        """Like :meth:`advance` but leaves the position unchanged."""
        self._check(n, what)
        return self._view[self._pos : self._pos + n]

    def align_to(self, alignment: int, what: str = "alignment padding") -> int:
        """Skip the smallest padding that makes the position a multiple of
        *alignment*; return the number of bytes skipped."""
        if alignment <= 0:
            raise ValueError(f"alignment must be positive, got {alignment}")
        pad = padding_for(self._pos, alignment)
        self.advance(pad, what)
        return pad

    def __repr__(self) -> str:
        return f"BoundsCursor(position={self._pos}, length={len(self._region)})"
