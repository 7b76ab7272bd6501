"""Code-point input and output channels for the flattener."""

from __future__ import annotations

from typing import IO
from typing import Final

EOF: Final = ""
DEFAULT_CHUNK_SIZE: Final = 8192


class CodePointReader:
    """Buffered pull of one code point at a time with one-step pushback.

    Reads the underlying text stream in chunks and keeps track of the
    position of the next code point so errors can point at the input.
    """

    def __init__(
        self, fp: IO[str], chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.fp = fp
        self.chunk_size = chunk_size
        self._chunk = ""
        self._index = 0
        self._can_unread = False
        self._prev_line = (1, 1)
        self.pos = 0
        self.lineno = 1
        self.colno = 1

    def _fill(self) -> bool:
        chunk = self.fp.read(self.chunk_size)
        if not chunk:
            return False
        self._chunk = chunk
        self._index = 0
        return True

    def read(self) -> str:
        """Returns the next code point, or EOF when the input is exhausted."""
        if self._index >= len(self._chunk) and not self._fill():
            self._can_unread = False
            return EOF
        ch = self._chunk[self._index]
        self._index += 1
        self._can_unread = True
        self._prev_line = (self.lineno, self.colno)
        self.pos += 1
        if ch == "\n":
            self.lineno += 1
            self.colno = 1
        else:
            self.colno += 1
        return ch

    def unread(self) -> None:
        """Pushes back the code point returned by the last read.

        A no-op after a read that returned EOF. Only one code point can
        be pushed back per read.
        """
        if not self._can_unread:
            return
        self._can_unread = False
        self._index -= 1
        self.pos -= 1
        self.lineno, self.colno = self._prev_line

    def peek(self) -> str:
        """Returns the next code point without consuming it."""
        ch = self.read()
        self.unread()
        return ch


class CodePointWriter:
    """Sink for single code points and raw text."""

    def __init__(self, fp: IO[str], line_buffered: bool = False) -> None:
        self.fp = fp
        self.line_buffered = line_buffered

    def write(self, ch: str) -> None:
        self.fp.write(ch)

    def write_raw(self, text: str) -> None:
        if text:
            self.fp.write(text)

    def end_line(self) -> None:
        self.fp.write("\n")
        if self.line_buffered:
            self.fp.flush()

    def flush(self) -> None:
        flush = getattr(self.fp, "flush", None)
        if flush is not None:
            flush()
