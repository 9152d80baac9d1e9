"""
=============================================================================
CHUNKED TRANSFER CODING (RFC 9112 §7.1)
=============================================================================

A chunked body is a sequence of length-prefixed chunks ended by a chunk of
size zero and an optional trailer section:

    4\r\n                 ◄─ size line (hex), optional ";ext" after the size
    Wiki\r\n              ◄─ exactly 4 bytes of data + CRLF
    5;name=val\r\n        ◄─ extensions are kept in the span, not interpreted
    pedia\r\n
    0\r\n                 ◄─ last chunk
    Expires: never\r\n    ◄─ trailer fields (optional)
    \r\n                  ◄─ end of body

=============================================================================
STATE MACHINE
=============================================================================

        ┌────────────┐  size > 0  ┌────────────┐
    ───►│ CHUNK_SIZE │───────────►│ CHUNK_DATA │
        └────────────┘◄───────────└────────────┘
              │          data + CRLF
              │ size == 0
              ▼
        ┌────────────┐            ┌────────────┐
        │  TRAILER   │───────────►│    DONE    │
        └────────────┘ empty line └────────────┘

=============================================================================
"""

import logging
from enum import Enum, auto
from typing import Callable, Optional, Tuple

from ..core.combinators import Matcher
from ..core.cursor import Cursor
from ..core.errors import ErrorKind, ParseError, unexpected_eof, unexpected_token
from ..core.span import Span, Spanned
from .types import Chunk, ChunkedBody, HeaderField

logger = logging.getLogger(__name__)

HEX_DIGITS = b"0123456789abcdefABCDEF"

# A chunk size needs to fit in 64 bits
MAX_SIZE_DIGITS = 16


class ChunkState(Enum):
    CHUNK_SIZE = auto()
    CHUNK_DATA = auto()
    TRAILER = auto()
    DONE = auto()


TrailerParser = Callable[[Cursor], Tuple[Spanned[HeaderField], ...]]


class ChunkedDecoder:
    """
    Drives the chunked state machine over a cursor.

    Line endings and the trailer section share their grammar with the
    message head, so the HTTP parser hands both in.
    """

    def __init__(self, line_end: Matcher, parse_trailers: TrailerParser):
        self._line_end = line_end
        self._parse_trailers = parse_trailers

    def decode(self, cursor: Cursor) -> Spanned[ChunkedBody]:
        """
        Consume a complete chunked body starting at the cursor.

        Raises:
            ParseError: INVALID_CHUNK_SIZE for a malformed size line,
                        UNEXPECTED_EOF if the buffer ends early.
        """
        with cursor.transaction() as start:
            chunks = []
            trailers: Tuple[Spanned[HeaderField], ...] = ()
            state = ChunkState.CHUNK_SIZE
            pending: Optional[Tuple[int, int, Span, Optional[Span]]] = None

            while state is not ChunkState.DONE:
                if state is ChunkState.CHUNK_SIZE:
                    chunk_start = cursor.offset
                    size, size_line, extensions = self._read_size_line(cursor)
                    if size == 0:
                        last = Chunk(0, size_line, extensions, Span.empty_at(cursor.offset))
                        chunks.append(Spanned(last, cursor.span_from(chunk_start)))
                        state = ChunkState.TRAILER
                    else:
                        pending = (chunk_start, size, size_line, extensions)
                        state = ChunkState.CHUNK_DATA

                elif state is ChunkState.CHUNK_DATA:
                    chunk_start, size, size_line, extensions = pending
                    data = cursor.take(size)
                    self._expect_line_end(cursor)
                    chunk = Chunk(size, size_line, extensions, data.span)
                    chunks.append(Spanned(chunk, cursor.span_from(chunk_start)))
                    pending = None
                    state = ChunkState.CHUNK_SIZE

                elif state is ChunkState.TRAILER:
                    trailers = self._parse_trailers(cursor)
                    state = ChunkState.DONE

            body = ChunkedBody(tuple(chunks), trailers)
            logger.debug(
                "Decoded chunked body: %d chunks, %d bytes, %d trailers",
                len(chunks) - 1, body.length, len(trailers),
            )
            return Spanned(body, cursor.span_from(start))

    def _read_size_line(self, cursor: Cursor) -> Tuple[int, Span, Optional[Span]]:
        line_start = cursor.offset
        digits = cursor.take_while(lambda b: b in HEX_DIGITS)

        if digits.span.is_empty or len(digits.span) > MAX_SIZE_DIGITS:
            if cursor.at_end():
                raise unexpected_eof(cursor.offset, "chunk size")
            raise ParseError(
                f"invalid chunk size {digits.value[:MAX_SIZE_DIGITS + 1]!r}",
                ErrorKind.INVALID_CHUNK_SIZE,
                line_start,
                "hexadecimal chunk size",
            )
        size = int(digits.value, 16)

        # BWS ";" chunk-ext, kept verbatim
        extensions = None
        cursor.take_while(lambda b: b in b" \t")
        if cursor.peek_byte() == ord(";"):
            ext = cursor.take_while(lambda b: b not in b"\r\n")
            extensions = ext.span

        size_line = cursor.span_from(line_start)
        next_byte = cursor.peek_byte()
        if next_byte is None:
            raise unexpected_eof(cursor.offset, "CRLF after chunk size")
        if next_byte not in b"\r\n":
            raise ParseError(
                f"invalid byte {bytes((next_byte,))!r} in chunk size line",
                ErrorKind.INVALID_CHUNK_SIZE,
                cursor.offset,
                "hexadecimal chunk size",
            )
        self._expect_line_end(cursor)
        return size, size_line, extensions

    def _expect_line_end(self, cursor: Cursor) -> None:
        if cursor.at_end():
            raise unexpected_eof(cursor.offset, "CRLF")
        try:
            self._line_end(cursor)
        except ParseError as err:
            if err.kind is ErrorKind.UNEXPECTED_EOF:
                raise
            raise unexpected_token(cursor.offset, "CRLF", cursor.buffer[cursor.offset:cursor.offset + 2]) from err
