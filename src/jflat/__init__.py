"""
One-pass JSON flattener.

Reads a single JSON value from a character stream and writes one
`path<TAB>value` line per leaf and per container, in document order,
without ever building a parse tree.
"""

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from io import StringIO
from typing import IO
from typing import Any
from typing import Final
from typing import NoReturn
from typing import TypeAlias

from ._buffer import MIN_CAPACITY
from ._buffer import BufferFull
from ._buffer import GrowableBuffer
from ._channel import EOF
from ._channel import CodePointReader
from ._channel import CodePointWriter

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

Position: TypeAlias = int

WHITESPACE: Final = frozenset(" \t\r\n")
# Code points that end an unquoted token; pushed back, never consumed
DELIMITERS: Final = WHITESPACE | frozenset(":,[]{}")
DEPTH_LIMIT_DEFAULT: Final = 256

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "JFLAT_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during flattening."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0

    def record_call(self, duration_ns: int) -> None:
        """Records a function call with its duration."""
        self.call_count += 1
        self.total_time_ns += duration_ns


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str):
            self.func_name = func_name
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


class FlattenError(ValueError):
    """
    Fatal flattening failure with the input position it was detected at.

    Position information is optional: failures raised away from the
    input channel (path bookkeeping) carry only a message.
    """

    def __init__(
        self,
        msg: str,
        pos: Position | None = None,
        lineno: int = 1,
        colno: int = 1,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if pos is not None and (not isinstance(pos, int) or pos < 0):
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.pos = pos
        self.lineno = lineno
        self.colno = colno

        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} at line {lineno}, column {colno}")


class UnbalancedNestingError(FlattenError):
    """More pops than pushes, or marks left over after the top-level value."""


class TrailingContentError(FlattenError):
    """Non-whitespace input after the single top-level value."""


class UnexpectedEndOfInput(FlattenError):
    """Input ended where more was required."""


class ValueKind(Enum):
    """The only value types the flattener distinguishes."""

    OBJECT = "object"
    ARRAY = "array"
    QUOTED = "quoted"
    UNQUOTED = "unquoted"


def value_kind(ch: str) -> ValueKind:
    """Classifies a value by its first code point."""
    if ch == "{":
        return ValueKind.OBJECT
    elif ch == "[":
        return ValueKind.ARRAY
    elif ch == '"':
        return ValueKind.QUOTED
    return ValueKind.UNQUOTED


@dataclass(frozen=True)
class FlattenConfig:
    """
    Configures flattening behavior with immutable settings.

    `strict` turns input that ends inside a string, key or escape, and
    values with no text at all, into fatal errors; with `strict=False`
    such input is flattened as far as it goes.
    """

    strict: bool = True
    quote_keys: bool = False
    max_depth: int = DEPTH_LIMIT_DEFAULT
    key_capacity: int = 16
    path_capacity: int = 64

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if not isinstance(self.quote_keys, bool):
            raise TypeError("quote_keys must be a boolean")
        if not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ValueError("max_depth must be a positive integer")
        for name in ("key_capacity", "path_capacity"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer")


class PathTracker:
    """
    Current address of the value being flattened, with rollback marks.

    The root key establishes a one code point prefix (the root
    separator), so first-level keys render as `.key` and first-level
    indices as `.[0]`. Every push saves the current length as a mark;
    `pop` restores it without touching storage.
    """

    def __init__(self, capacity: int = MIN_CAPACITY) -> None:
        self.buffer = GrowableBuffer(capacity)
        self.length = 0
        self.marks: list[int] = []

    @property
    def depth(self) -> int:
        return len(self.marks)

    def push_key(self, key: str) -> None:
        self.marks.append(self.length)
        template = "{}" if self.length == 1 else ".{}"
        self.length += self.buffer.append_at(self.length, template, key)

    def push_index(self, index: int) -> None:
        self.marks.append(self.length)
        self.length += self.buffer.append_at(self.length, "[{:d}]", index)

    def pop(self) -> None:
        if not self.marks:
            raise UnbalancedNestingError(
                "unbalanced nesting: pop without push"
            )
        self.length = self.marks.pop()

    def render(self) -> str:
        """Returns the path text; the root value has the empty path."""
        if len(self.marks) <= 1:
            return ""
        return self.buffer.text(0, self.length)


def _error(
    reader: CodePointReader, msg: str, cls: type[FlattenError] = FlattenError
) -> FlattenError:
    return cls(msg, reader.pos, reader.lineno, reader.colno)


def _describe(ch: str) -> str:
    return "EOF" if ch == EOF else repr(ch)


def scan_key(
    reader: CodePointReader, buffer: GrowableBuffer, strict: bool = True
) -> tuple[int, bool]:
    """
    Scans one quoted object key into buffer, escapes kept verbatim.

    Returns the key length in code points, quotes included, and whether
    the closing quote was seen. Without `strict`, input that ends inside
    the key stops the scan silently.
    """
    with ProfileContext("scan_key"):
        ch = reader.read()
        if ch == EOF:
            raise _error(
                reader,
                "unexpected end of input, wanted '\"'",
                UnexpectedEndOfInput,
            )
        if ch != '"':
            reader.unread()
            raise _error(reader, f"unexpected rune {ch!r}, wanted '\"'")
        end = buffer.put(0, ch)
        while True:
            ch = reader.read()
            if ch == EOF:
                if strict:
                    raise _error(
                        reader,
                        "unexpected end of input in object key",
                        UnexpectedEndOfInput,
                    )
                return end, False
            end = buffer.put(end, ch)
            if ch == '"':
                return end, True
            if ch == "\\":
                escaped = reader.read()
                if escaped == EOF:
                    if strict:
                        raise _error(
                            reader,
                            "unexpected end of input in object key",
                            UnexpectedEndOfInput,
                        )
                    return end, False
                end = buffer.put(end, escaped)


class Flattener:
    """
    Recursive-descent flattener over a code-point channel.

    Owns the path tracker and key buffer for exactly one run. Each
    production writes its output line as soon as the value is recognized
    and recurses into children through the path tracker.
    """

    def __init__(
        self,
        reader: CodePointReader,
        writer: CodePointWriter,
        config: FlattenConfig | None = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.config = config or FlattenConfig()
        self.path = PathTracker(self.config.path_capacity)
        self.key = GrowableBuffer(self.config.key_capacity)

    def fail(
        self, msg: str, cls: type[FlattenError] = FlattenError
    ) -> NoReturn:
        raise _error(self.reader, msg, cls)

    def skip_whitespace(self) -> None:
        while True:
            ch = self.reader.read()
            if ch not in WHITESPACE:
                self.reader.unread()
                return

    def expect(self, wanted: str) -> None:
        ch = self.reader.read()
        if ch == wanted:
            return
        if ch == EOF:
            self.fail(
                f"unexpected end of input, wanted {wanted!r}",
                UnexpectedEndOfInput,
            )
        self.reader.unread()
        self.fail(f"unexpected rune {ch!r}, wanted {wanted!r}")

    def _truncated(self, where: str) -> None:
        if self.config.strict:
            self.fail(
                f"unexpected end of input in {where}", UnexpectedEndOfInput
            )

    def _begin_line(self) -> None:
        self.writer.write_raw(self.path.render())
        self.writer.write("\t")

    def _check_depth(self) -> None:
        if self.path.depth > self.config.max_depth:
            self.fail("too much nesting")

    def _key_label(self, length: int, closed: bool) -> str:
        if self.config.quote_keys:
            return self.key.text(0, length)
        return self.key.text(1, length - 1 if closed else length)

    def parse_value(self) -> None:
        """Flattens the value starting at the next non-whitespace code point."""
        self.skip_whitespace()
        kind = value_kind(self.reader.peek())
        if kind is ValueKind.OBJECT:
            self.parse_object()
        elif kind is ValueKind.ARRAY:
            self.parse_array()
        elif kind is ValueKind.QUOTED:
            self.parse_quoted()
        else:
            self.parse_unquoted()

    def parse_object(self) -> None:
        with ProfileContext("parse_object"):
            self._begin_line()
            self.writer.write_raw("{}")
            self.writer.end_line()
            self.expect("{")
            self.skip_whitespace()
            if self.reader.read() == "}":
                return
            self.reader.unread()

            while True:
                self.skip_whitespace()
                length, closed = scan_key(
                    self.reader, self.key, self.config.strict
                )
                self.skip_whitespace()
                self.expect(":")
                self.skip_whitespace()
                self._check_depth()
                self.path.push_key(self._key_label(length, closed))
                self.parse_value()
                self.path.pop()
                self.skip_whitespace()
                ch = self.reader.read()
                if ch == "}":
                    return
                if ch != ",":
                    self.reader.unread()
                    self.fail(
                        "unexpected rune after key-value pair: "
                        + _describe(ch),
                        UnexpectedEndOfInput if ch == EOF else FlattenError,
                    )
                self.skip_whitespace()
                ch = self.reader.peek()
                if ch != '"':
                    self.fail(
                        "unexpected rune after key-value pair: "
                        f"',' followed by {_describe(ch)}",
                        UnexpectedEndOfInput if ch == EOF else FlattenError,
                    )

    def parse_array(self) -> None:
        with ProfileContext("parse_array"):
            self._begin_line()
            self.writer.write_raw("[]")
            self.writer.end_line()
            self.expect("[")
            self.skip_whitespace()
            if self.reader.read() == "]":
                return
            self.reader.unread()

            index = 0
            while True:
                self.skip_whitespace()
                self._check_depth()
                self.path.push_index(index)
                self.parse_value()
                self.path.pop()
                self.skip_whitespace()
                ch = self.reader.read()
                if ch == "]":
                    return
                if ch != ",":
                    self.reader.unread()
                    self.fail(
                        "unexpected rune after array value: " + _describe(ch),
                        UnexpectedEndOfInput if ch == EOF else FlattenError,
                    )
                self.skip_whitespace()
                if self.config.strict and self.reader.peek() == "]":
                    self.fail(
                        "unexpected rune after array value: "
                        "',' followed by ']'"
                    )
                index += 1

    def parse_quoted(self) -> None:
        with ProfileContext("parse_quoted"):
            self._begin_line()
            self.writer.write('"')
            self.expect('"')
            while True:
                ch = self.reader.read()
                if ch == EOF:
                    break
                self.writer.write(ch)
                if ch == '"':
                    self.writer.end_line()
                    return
                if ch == "\\":
                    escaped = self.reader.read()
                    if escaped == EOF:
                        break
                    self.writer.write(escaped)
            self._truncated("quoted string")
            self.writer.end_line()

    def parse_unquoted(self) -> None:
        with ProfileContext("parse_unquoted"):
            if self.config.strict:
                ch = self.reader.peek()
                if ch == EOF:
                    self.fail(
                        "unexpected end of input, expected value",
                        UnexpectedEndOfInput,
                    )
                if ch in DELIMITERS:
                    self.fail(f"unexpected rune {ch!r}, expected value")
            self._begin_line()
            while True:
                ch = self.reader.read()
                if ch == EOF:
                    break
                if ch in DELIMITERS:
                    self.reader.unread()
                    break
                self.writer.write(ch)
            self.writer.end_line()

    def run(self) -> None:
        """Flattens exactly one value and requires the input to end after it."""
        logger.debug("flattening started")
        with ProfileContext("run"):
            self.path.push_key("")
            try:
                self.parse_value()
            except RecursionError:
                self.fail("too much nesting")
            self.path.pop()
            self.skip_whitespace()
            if self.path.depth != 0 or self.path.length != 0:
                self.fail(
                    "lingering element on stack: "
                    f"depth={self.path.depth} length={self.path.length}",
                    UnbalancedNestingError,
                )
            ch = self.reader.read()
            if ch != EOF:
                self.reader.unread()
                self.fail(
                    f"trailing content after parsing value: {ch!r}",
                    TrailingContentError,
                )
        logger.debug(
            "flattening finished after %d code points", self.reader.pos
        )


def flatten(fp: IO[str], out: IO[str], **kwargs: Any) -> None:
    """
    Flattens the JSON value read from fp, writing lines to out.

    Lines written before a fatal error stay written.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")
    if not hasattr(out, "write"):
        raise TypeError("out must have a write() method")

    config = FlattenConfig(**kwargs)
    writer = CodePointWriter(out)
    try:
        Flattener(CodePointReader(fp), writer, config).run()
    finally:
        writer.flush()


def flattens(s: str, **kwargs: Any) -> str:
    """Flattens a JSON document held in a string."""
    if not isinstance(s, str):
        raise TypeError(
            f"the JSON document must be str, not {type(s).__name__}"
        )

    out = StringIO()
    flatten(StringIO(s), out, **kwargs)
    return out.getvalue()


def collect(s: str, **kwargs: Any) -> list[tuple[str, str]]:
    """
    Returns the (path, value) pairs for a JSON document.

    Splits each line on its first tab, so a key holding a raw tab
    character makes the split ambiguous.
    """
    pairs = []
    for line in flattens(s, **kwargs).split("\n")[:-1]:
        path, _, value = line.partition("\t")
        pairs.append((path, value))
    return pairs


__all__ = [
    "DELIMITERS",
    "EOF",
    "BufferFull",
    "CodePointReader",
    "CodePointWriter",
    "FlattenConfig",
    "FlattenError",
    "Flattener",
    "GrowableBuffer",
    "HotPathStats",
    "PathTracker",
    "TrailingContentError",
    "UnbalancedNestingError",
    "UnexpectedEndOfInput",
    "ValueKind",
    "clear_hot_path_stats",
    "collect",
    "flatten",
    "flattens",
    "get_hot_path_stats",
    "scan_key",
    "value_kind",
]
