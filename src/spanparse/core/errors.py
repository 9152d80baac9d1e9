"""
=============================================================================
PARSE ERRORS
=============================================================================

Every failure in spanparse is reported as a ParseError carrying two pieces
of metadata:

    kind    - an ErrorKind member (what went wrong)
    offset  - the absolute byte offset where the failure was detected

Offsets are byte positions, never line/column pairs. The parser is
byte-oriented and so are its callers (they slice buffers with spans).

=============================================================================
ERROR HIERARCHY
=============================================================================

    ParseError
    ├── SpanError          Span construction / union failures
    ├── HttpParseError     raised by the HTTP grammar entry points
    └── JsonParseError     raised by the JSON grammar entry points

The cursor and combinator layer raises plain ParseError. The grammar entry
points re-raise those as their own subclass so callers can catch per format:

    try:
        message = parse_http_request(data)
    except HttpParseError as e:
        if e.kind is ErrorKind.UNEXPECTED_EOF:
            ...  # read more bytes and retry

=============================================================================
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Classification of parse failures."""

    UNEXPECTED_EOF = "unexpected_eof"                # Input ended mid-element
    UNEXPECTED_TOKEN = "unexpected_token"            # Bytes did not match the grammar
    INVALID_RANGE = "invalid_range"                  # Span with start > end
    NON_CONTIGUOUS = "non_contiguous"                # Union of spans with a gap
    MALFORMED_HEADER_NAME = "malformed_header_name"  # Header name outside token charset
    AMBIGUOUS_FRAMING = "ambiguous_framing"          # Conflicting body length indicators
    INVALID_CHUNK_SIZE = "invalid_chunk_size"        # Chunk size line is not hex
    DELIMITER_NOT_FOUND = "delimiter_not_found"      # take_until() found no delimiter
    TRAILING_DATA = "trailing_data"                  # Bytes after a complete JSON value
    TOO_FEW_REPETITIONS = "too_few_repetitions"      # repeat() matched fewer than min
    LIMIT_EXCEEDED = "limit_exceeded"                # Header count / nesting depth guard
    UNFRAMED_BODY = "unframed_body"                  # Response body without any framing


class ParseError(Exception):
    """
    Raised when input does not match the grammar being parsed.

    Attributes:
        kind: The ErrorKind of the failure.
        offset: Absolute byte offset at which the failure was detected.
        expected: Human-readable description of what was expected, if any.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        offset: int,
        expected: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.offset = offset
        self.expected = expected

    @classmethod
    def from_error(cls, error: "ParseError") -> "ParseError":
        """Rebuild an error as this class, keeping its metadata."""
        return cls(error.args[0], error.kind, error.offset, error.expected)

    def __str__(self) -> str:
        return f"{super().__str__()} (at offset {self.offset})"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.name}, "
            f"offset={self.offset}, message={super().__str__()!r})"
        )


class SpanError(ParseError, ValueError):
    """Invalid span construction or combination."""


class HttpParseError(ParseError):
    """An HTTP message could not be parsed."""


class JsonParseError(ParseError):
    """A JSON document could not be parsed."""


def unexpected_eof(offset: int, expected: Optional[str] = None) -> ParseError:
    what = f", expected {expected}" if expected else ""
    return ParseError(
        f"unexpected end of input{what}",
        ErrorKind.UNEXPECTED_EOF,
        offset,
        expected,
    )


def unexpected_token(offset: int, expected: str, found: bytes = b"") -> ParseError:
    got = f", found {found!r}" if found else ""
    return ParseError(
        f"expected {expected}{got}",
        ErrorKind.UNEXPECTED_TOKEN,
        offset,
        expected,
    )
