"""
=============================================================================
HTTP MESSAGE TREE
=============================================================================

The HTTP parser returns a tree of spanned nodes. Every node records where
in the buffer it came from:

    POST /submit HTTP/1.1\r\n          ◄─ method / target / version
    Host: example.com\r\n              ◄─ HeaderField (span includes CRLF)
    Content-Length: 5\r\n              ◄─ HeaderField
    \r\n                               ◄─ end of head
    hello                              ◄─ ContentLengthBody.content
    └──────────────── Spanned[Request].span ────────────────┘

Header names keep their original casing in the buffer; lookups are
case-insensitive:

    request.header("content-length")   # finds "Content-Length: 5"

=============================================================================
BODY VARIANTS
=============================================================================

    EmptyBody           no body (no framing headers on a request, 204, ...)
    ContentLengthBody   exactly Content-Length bytes
    ChunkedBody         Transfer-Encoding: chunked, chunks + trailers
    ToEndBody           everything until the end of the buffer (the caller
                        asserted that the connection was closed)

Every variant can produce its payload with decode(buffer). For chunked
bodies that strips the chunk framing:

    4\r\nWiki\r\n5\r\npedia\r\n0\r\n\r\n    →    b"Wikipedia"

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from ..core.span import Buffer, Span, Spanned


class FramingHint(Enum):
    """
    What the caller knows about the connection a response arrived on.

    A response with neither Content-Length nor Transfer-Encoding is
    delimited by the connection closing. Only the caller can know whether
    that happened, so the parser needs to be told.
    """

    LENGTH_REQUIRED = "length_required"  # No connection context: body needs framing headers
    READ_TO_CLOSE = "read_to_close"      # Connection closed: unframed body runs to buffer end
    HEAD_RESPONSE = "head_response"      # Response to HEAD: never has a body


@dataclass(frozen=True)
class HeaderField:
    """A single "name: value" header line."""

    name: Spanned[str]
    value: Spanned[bytes]

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.value.lower() == name.lower()

    @property
    def text(self) -> str:
        """Value decoded as latin-1 (every byte maps to one character)."""
        return self.value.value.decode("latin-1")


# =============================================================================
# BODY
# =============================================================================

@dataclass(frozen=True)
class Chunk:
    """
    One chunk of a chunked body.

    The Spanned[Chunk] wrapping this covers size-line + data + CRLF. The
    terminal zero-size chunk covers its size line only.
    """

    size: int
    size_line: Span                 # hex digits + extensions, no CRLF
    extensions: Optional[Span]      # ";name=value..." if present, unparsed
    data: Span

    @property
    def is_last(self) -> bool:
        return self.size == 0


@dataclass(frozen=True)
class EmptyBody:
    def content_spans(self) -> Tuple[Span, ...]:
        return ()

    def decode(self, buffer: Buffer) -> bytes:
        return b""


@dataclass(frozen=True)
class ContentLengthBody:
    length: int
    content: Span

    def content_spans(self) -> Tuple[Span, ...]:
        return (self.content,)

    def decode(self, buffer: Buffer) -> bytes:
        return self.content.extract(buffer)


@dataclass(frozen=True)
class ChunkedBody:
    chunks: Tuple[Spanned[Chunk], ...]
    trailers: Tuple[Spanned[HeaderField], ...] = ()

    def content_spans(self) -> Tuple[Span, ...]:
        """Data spans of all non-empty chunks, in order."""
        return tuple(c.value.data for c in self.chunks if c.value.size)

    def decode(self, buffer: Buffer) -> bytes:
        return b"".join(span.extract(buffer) for span in self.content_spans())

    @property
    def length(self) -> int:
        return sum(c.value.size for c in self.chunks)


@dataclass(frozen=True)
class ToEndBody:
    content: Span

    def content_spans(self) -> Tuple[Span, ...]:
        return (self.content,)

    def decode(self, buffer: Buffer) -> bytes:
        return self.content.extract(buffer)


Body = Union[EmptyBody, ContentLengthBody, ChunkedBody, ToEndBody]


# =============================================================================
# MESSAGES
# =============================================================================

class _HeaderLookup:
    """Header accessors shared by Request and Response."""

    headers: Tuple[Spanned[HeaderField], ...]

    def headers_named(self, name: str) -> list[Spanned[HeaderField]]:
        """All header fields with the given name, in message order."""
        return [h for h in self.headers if h.value.matches(name)]

    def header(self, name: str) -> Optional[Spanned[HeaderField]]:
        """First header field with the given name, or None."""
        for h in self.headers:
            if h.value.matches(name):
                return h
        return None

    def get_header(self, name: str, default: Optional[bytes] = None) -> Optional[bytes]:
        """Value bytes of the first matching header, or default."""
        found = self.header(name)
        return found.value.value.value if found is not None else default


@dataclass(frozen=True)
class Request(_HeaderLookup):
    method: Spanned[str]
    target: Spanned[str]
    version: Spanned[str]
    headers: Tuple[Spanned[HeaderField], ...]
    body: Spanned[Body]
    head: Span                      # request-line through the empty line


@dataclass(frozen=True)
class Response(_HeaderLookup):
    version: Spanned[str]
    status: Spanned[int]
    reason: Spanned[str]
    headers: Tuple[Spanned[HeaderField], ...]
    body: Spanned[Body]
    head: Span                      # status-line through the empty line
