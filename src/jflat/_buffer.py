"""Growable code-point buffer backing path and key construction."""

from __future__ import annotations

import logging
from typing import Final

logger = logging.getLogger(__name__)

MIN_CAPACITY: Final = 8


class BufferFull(Exception):
    """Raised when rendered text does not fit in the remaining capacity."""

    def __init__(self, needed: int, capacity: int) -> None:
        self.needed = needed
        self.capacity = capacity
        super().__init__(f"need {needed} code points, capacity is {capacity}")


class GrowableBuffer:
    """Resizable sequence of code points with capacity doubling.

    Callers track their own used length and write at explicit offsets.
    Content past the caller's logical end is stale and must not be read.
    The buffer only ever grows.
    """

    def __init__(self, capacity: int = MIN_CAPACITY) -> None:
        """Initialize an empty buffer.

        Args:
            capacity: Number of code points the buffer holds before the
                first doubling
        """
        if not isinstance(capacity, int) or capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self._data: list[str] = [""] * capacity

    @property
    def capacity(self) -> int:
        return len(self._data)

    def format_at(self, offset: int, template: str, *args: object) -> int:
        """Render formatted text at offset without growing.

        Returns:
            Number of code points written

        Raises:
            BufferFull: if the text does not fit; nothing is written
        """
        text = template.format(*args)
        end = offset + len(text)
        if end > len(self._data):
            raise BufferFull(end, len(self._data))
        self._data[offset:end] = text
        return len(text)

    def grow(self) -> None:
        """Double capacity, keeping existing content."""
        old = self._data
        self._data = old + [""] * len(old)
        logger.debug("buffer grown to %d code points", len(self._data))

    def append_at(self, offset: int, template: str, *args: object) -> int:
        """Render formatted text at offset, growing until it fits."""
        while True:
            try:
                return self.format_at(offset, template, *args)
            except BufferFull:
                self.grow()

    def put(self, offset: int, ch: str) -> int:
        """Store one code point at offset and return the next offset."""
        while offset >= len(self._data):
            self.grow()
        self._data[offset] = ch
        return offset + 1

    def text(self, start: int, end: int) -> str:
        """Return the code points in [start, end) as a string."""
        if end > len(self._data):
            raise IndexError("read past buffer capacity")
        return "".join(self._data[start:end])
