"""
=============================================================================
CURSOR
=============================================================================

A Cursor is a read-only, position-tracking view over a byte buffer. All
grammars in spanparse are driven by one.

    buffer:  b"Host: example.com\r\n"
              ▲
              offset

    cursor.take_while(is_tchar)   -> Spanned(b"Host", Span(0, 4))
    cursor.expect_literal(b":")   -> Spanned(b":", Span(4, 5))

=============================================================================
THE NO-DRIFT CONTRACT
=============================================================================

    1. The offset only moves forward, and only when a matcher succeeds.
    2. A matcher that fails leaves the offset exactly where it was.

Rule 2 is what makes backtracking cheap: an alternation can try one branch,
catch the ParseError and try the next branch from the same position.
Composite matchers that call several primitives use transaction() to get
the same all-or-nothing behaviour:

    with cursor.transaction():
        cursor.expect_literal(b"HTTP/")
        major = cursor.expect_byte(DIGITS, "digit")
        ...

=============================================================================
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .errors import ErrorKind, ParseError, unexpected_eof, unexpected_token
from .span import Buffer, Span, Spanned


class Cursor:
    """
    Position-tracking view over an immutable byte buffer.

    The buffer is converted with bytes(), which returns the very same
    object for bytes input, so parsing a bytes buffer never copies it.
    A bytearray or memoryview is copied once into an immutable snapshot;
    later mutation of the caller's buffer does not affect the parse.
    Spans index the snapshot and the original alike.
    """

    def __init__(self, buffer: Buffer, offset: int = 0):
        self._buffer = bytes(buffer)
        if not 0 <= offset <= len(self._buffer):
            raise ParseError(
                f"cursor offset {offset} outside buffer of {len(self._buffer)} bytes",
                ErrorKind.INVALID_RANGE,
                offset,
            )
        self._offset = offset

    # =========================================================================
    # POSITION
    # =========================================================================

    @property
    def buffer(self) -> bytes:
        return self._buffer

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._buffer) - self._offset

    def at_end(self) -> bool:
        return self._offset >= len(self._buffer)

    def span_from(self, start: int) -> Span:
        """Span from start up to the current offset."""
        return Span(start, self._offset)

    def reset(self, mark: int) -> None:
        """
        Restore a previously saved offset.

        Only composite matchers should call this, with a mark they took
        themselves before advancing.
        """
        if not 0 <= mark <= self._offset:
            raise ParseError(
                f"cannot reset cursor from {self._offset} to {mark}",
                ErrorKind.INVALID_RANGE,
                mark,
            )
        self._offset = mark

    @contextmanager
    def transaction(self) -> Iterator[int]:
        """
        Snapshot the offset; restore it if the block raises ParseError.

        Yields the starting offset, handy for building the final span.
        """
        mark = self._offset
        try:
            yield mark
        except ParseError:
            self._offset = mark
            raise

    # =========================================================================
    # PRIMITIVE MATCHERS
    # =========================================================================

    def peek_byte(self) -> Optional[int]:
        """Next byte as an int, or None at end of input."""
        if self._offset >= len(self._buffer):
            return None
        return self._buffer[self._offset]

    def peek(self, n: int) -> bytes:
        """Next n bytes without advancing."""
        if self.remaining < n:
            raise unexpected_eof(len(self._buffer), f"{n} bytes")
        return self._buffer[self._offset:self._offset + n]

    def take(self, n: int) -> Spanned[bytes]:
        """Consume exactly n bytes."""
        if n < 0:
            raise ParseError(
                f"cannot take a negative number of bytes ({n})",
                ErrorKind.INVALID_RANGE,
                self._offset,
            )
        if self.remaining < n:
            raise unexpected_eof(len(self._buffer), f"{n} bytes")
        start = self._offset
        self._offset += n
        return Spanned(self._buffer[start:self._offset], Span(start, self._offset))

    def expect_literal(self, literal: bytes, expected: Optional[str] = None) -> Spanned[bytes]:
        """
        Consume an exact byte sequence.

        If the input ends while still matching a prefix of the literal the
        failure is UNEXPECTED_EOF (more bytes might complete it), otherwise
        UNEXPECTED_TOKEN.
        """
        expected = expected or repr(literal)
        start = self._offset
        end = start + len(literal)
        window = self._buffer[start:end]
        if window != literal:
            if len(window) < len(literal) and literal.startswith(window):
                raise unexpected_eof(len(self._buffer), expected)
            raise unexpected_token(start, expected, window[:8])
        self._offset = end
        return Spanned(literal, Span(start, end))

    def expect_byte(self, charset: bytes, expected: str) -> Spanned[bytes]:
        """Consume one byte that is a member of charset."""
        b = self.peek_byte()
        if b is None:
            raise unexpected_eof(self._offset, expected)
        if b not in charset:
            raise unexpected_token(self._offset, expected, bytes((b,)))
        start = self._offset
        self._offset += 1
        return Spanned(bytes((b,)), Span(start, self._offset))

    def take_until(self, delimiter: bytes, limit: Optional[int] = None) -> Spanned[bytes]:
        """
        Consume up to, not including, the first occurrence of delimiter.

        Args:
            delimiter: Byte sequence to search for.
            limit: Maximum number of bytes to search past the current
                   offset (the delimiter must end within this window).
        """
        start = self._offset
        stop = len(self._buffer) if limit is None else min(len(self._buffer), start + limit)
        index = self._buffer.find(delimiter, start, stop)
        if index == -1:
            raise ParseError(
                f"delimiter {delimiter!r} not found",
                ErrorKind.DELIMITER_NOT_FOUND,
                start,
                repr(delimiter),
            )
        self._offset = index
        return Spanned(self._buffer[start:index], Span(start, index))

    def take_while(self, predicate: Callable[[int], bool]) -> Spanned[bytes]:
        """Consume bytes while predicate holds. May consume nothing."""
        buffer = self._buffer
        start = end = self._offset
        size = len(buffer)
        while end < size and predicate(buffer[end]):
            end += 1
        self._offset = end
        return Spanned(buffer[start:end], Span(start, end))

    def __repr__(self) -> str:
        return f"Cursor(offset={self._offset}, size={len(self._buffer)})"
