"""
=============================================================================
HTTP MESSAGE PARSER
=============================================================================

Parses one HTTP/1.1 request or response from a byte buffer into a spanned
message tree. Implements the message syntax of RFC 9112.

=============================================================================
MESSAGE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP MESSAGE STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   start-line       GET /index.html HTTP/1.1\r\n                     │
    │                    ─┬─ ─────┬───── ────┬───                         │
    │                  method  target     version                         │
    │                                                                      │
    │   header fields    Host: example.com\r\n                            │
    │                    ─┬── ─────┬──────                                │
    │                    name    value      (OWS around value excluded)   │
    │                                                                      │
    │   empty line       \r\n                                              │
    │                                                                      │
    │   body             framed by Content-Length, chunked coding,        │
    │                    or (responses only) connection close             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BODY FRAMING (RFC 9112 §6.3)
=============================================================================

Decided in this exact order:

    1. Content-Length AND Transfer-Encoding both present       → AMBIGUOUS_FRAMING
    2. Response with status 1xx/204/304, or answering a HEAD  → EmptyBody
    3. Content-Length                                          → ContentLengthBody
    4. Transfer-Encoding ending in "chunked"                   → ChunkedBody
    5. Request                                                 → EmptyBody
    6. Response, FramingHint.READ_TO_CLOSE                     → ToEndBody
    7. Response, nothing left in the buffer                    → EmptyBody
    8. Response, bytes left but no framing                     → UNFRAMED_BODY

Rule 1 applies to every message, including responses that carry no body,
so one length indicator is never silently preferred over the other.

=============================================================================
"""

import logging
from typing import Iterator, Optional, Tuple

from ..config import DEFAULT_CONFIG, ParserConfig
from ..core.combinators import (
    alternation,
    literal,
    map_value,
    one_of,
    optional,
    repeat,
    sequence,
    take_while1,
)
from ..core.cursor import Cursor
from ..core.errors import (
    ErrorKind,
    HttpParseError,
    ParseError,
    unexpected_eof,
    unexpected_token,
)
from ..core.span import Buffer, Span, Spanned
from .chunked import ChunkedDecoder
from .types import (
    Body,
    ContentLengthBody,
    EmptyBody,
    FramingHint,
    HeaderField,
    Request,
    Response,
    ToEndBody,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CHARACTER CLASSES (RFC 9110 §5.6.2)
# =============================================================================

DIGITS = b"0123456789"
TCHARS = frozenset(
    b"!#$%&'*+-.^_`|~"
    + DIGITS
    + b"abcdefghijklmnopqrstuvwxyz"
    + b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def is_tchar(b: int) -> bool:
    return b in TCHARS


def is_target_byte(b: int) -> bool:
    # VCHAR or obs-text, no whitespace
    return 0x21 <= b <= 0x7E or b >= 0x80


def is_field_byte(b: int) -> bool:
    # field-vchar / SP / HTAB / obs-text
    return b == 0x09 or (b >= 0x20 and b != 0x7F)


def is_ows(b: int) -> bool:
    return b == 0x20 or b == 0x09


NO_BODY_STATUSES = frozenset({204, 304})


class HttpParser:
    """
    Parses HTTP/1.1 requests and responses into spanned message trees.

    The parser holds only its configuration and the matchers built from
    it, so one instance can be shared between threads.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or DEFAULT_CONFIG

        if self.config.allow_bare_lf:
            self._line_end = alternation(
                literal(b"\r\n", "CRLF"),
                literal(b"\n", "CRLF"),
            )
        else:
            self._line_end = literal(b"\r\n", "CRLF")
        self._empty_line = optional(self._line_end)

        self._version = map_value(
            sequence(
                literal(b"HTTP/", "HTTP version"),
                one_of(DIGITS, "major version digit"),
                literal(b".", "'.'"),
                one_of(DIGITS, "minor version digit"),
            ),
            lambda parts: b"".join(p.value for p in parts).decode("ascii"),
        )

        self._request_line = sequence(
            map_value(take_while1(is_tchar, "method token"), lambda v: v.decode("ascii")),
            literal(b" ", "SP"),
            map_value(take_while1(is_target_byte, "request target"), lambda v: v.decode("latin-1")),
            literal(b" ", "SP"),
            self._version,
            self._line_end,
        )

        self._status_line = sequence(
            self._version,
            literal(b" ", "SP"),
            map_value(
                repeat(one_of(DIGITS, "status code digit"), min=3, max=3),
                lambda digits: int(b"".join(d.value for d in digits)),
            ),
        )
        self._reason = optional(
            sequence(
                literal(b" ", "SP"),
                map_value(lambda c: c.take_while(is_field_byte), lambda v: v.decode("latin-1")),
            )
        )

        self._chunked = ChunkedDecoder(self._line_end, self._parse_header_block)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def parse_request(self, buffer: Buffer, offset: int = 0) -> Spanned[Request]:
        """
        Parse one request starting at offset.

        Args:
            buffer: The complete input buffer. bytes is parsed in place;
                    a bytearray or memoryview is snapshotted once.
            offset: Absolute position of the first byte of the request.
                    Spans in the result are absolute buffer offsets.

        Returns:
            Spanned[Request] covering the request line through the body.

        Raises:
            HttpParseError: If the bytes are not a valid request.
        """
        try:
            cursor = Cursor(buffer, offset)
            with cursor.transaction() as start:
                line = self._request_line(cursor)
                method, _, target, _, version, _ = line.value
                headers = self._parse_header_block(cursor)
                head = cursor.span_from(start)
                body = self._request_body(cursor, headers)
                request = Request(method, target, version, headers, body, head)
                result = Spanned(request, cursor.span_from(start))
        except ParseError as err:
            logger.debug("Request parse failed: %s at offset %d", err.kind.name, err.offset)
            raise HttpParseError.from_error(err) from err

        logger.debug(
            "Parsed request %s %s: %d headers, %s, span %s",
            method.value, target.value, len(headers), type(body.value).__name__, result.span,
        )
        return result

    def parse_response(
        self,
        buffer: Buffer,
        framing_hint: FramingHint = FramingHint.LENGTH_REQUIRED,
        offset: int = 0,
    ) -> Spanned[Response]:
        """
        Parse one response starting at offset.

        Args:
            buffer: The complete input buffer. bytes is parsed in place;
                    a bytearray or memoryview is snapshotted once.
            framing_hint: What the caller knows about the connection; decides
                          how a response without framing headers is handled.
            offset: Absolute position of the first byte of the response.

        Raises:
            HttpParseError: If the bytes are not a valid response.
        """
        try:
            cursor = Cursor(buffer, offset)
            with cursor.transaction() as start:
                line = self._status_line(cursor)
                version, _, status = line.value
                reason = self._parse_reason(cursor)
                headers = self._parse_header_block(cursor)
                head = cursor.span_from(start)
                body = self._response_body(cursor, headers, status.value, framing_hint)
                response = Response(version, status, reason, headers, body, head)
                result = Spanned(response, cursor.span_from(start))
        except ParseError as err:
            logger.debug("Response parse failed: %s at offset %d", err.kind.name, err.offset)
            raise HttpParseError.from_error(err) from err

        logger.debug(
            "Parsed response %d: %d headers, %s, span %s",
            status.value, len(headers), type(body.value).__name__, result.span,
        )
        return result

    # =========================================================================
    # START LINE AND HEADERS
    # =========================================================================

    def _parse_reason(self, cursor: Cursor) -> Spanned[str]:
        after_status = cursor.offset
        reason = self._reason(cursor)
        if cursor.at_end():
            raise unexpected_eof(cursor.offset, "CRLF after status line")
        self._line_end(cursor)
        if reason is None:
            return Spanned("", Span.empty_at(after_status))
        return reason.value[1]

    def _parse_header_block(self, cursor: Cursor) -> Tuple[Spanned[HeaderField], ...]:
        """
        Parse header fields up to and including the terminating empty line.

        Also used for the trailer section of chunked bodies.
        """
        headers = []
        while self._empty_line(cursor) is None:
            if len(headers) >= self.config.max_headers:
                raise ParseError(
                    f"more than {self.config.max_headers} header fields",
                    ErrorKind.LIMIT_EXCEEDED,
                    cursor.offset,
                )
            headers.append(self._parse_header_field(cursor))
        return tuple(headers)

    def _parse_header_field(self, cursor: Cursor) -> Spanned[HeaderField]:
        """
        Parse "field-name ":" OWS field-value OWS CRLF".

        The field name must be a token immediately followed by a colon.
        Whitespace before the colon and obs-fold continuation lines are
        rejected as MALFORMED_HEADER_NAME.
        """
        with cursor.transaction() as start:
            name = cursor.take_while(is_tchar)
            next_byte = cursor.peek_byte()
            if next_byte is None:
                raise unexpected_eof(cursor.offset, "':' after header name")
            if name.span.is_empty or next_byte != ord(":"):
                raise ParseError(
                    f"invalid byte {bytes((next_byte,))!r} in header name",
                    ErrorKind.MALFORMED_HEADER_NAME,
                    cursor.offset,
                    "header name token followed by ':'",
                )
            cursor.expect_literal(b":")
            cursor.take_while(is_ows)

            raw = cursor.take_while(is_field_byte)
            trimmed = raw.value.rstrip(b" \t")
            value = Spanned(trimmed, Span(raw.start, raw.start + len(trimmed)))

            if cursor.at_end():
                raise unexpected_eof(cursor.offset, "CRLF after header value")
            self._line_end(cursor)

            field = HeaderField(name.map(lambda v: v.decode("ascii")), value)
            return Spanned(field, cursor.span_from(start))

    # =========================================================================
    # BODY FRAMING
    # =========================================================================

    def _request_body(
        self,
        cursor: Cursor,
        headers: Tuple[Spanned[HeaderField], ...],
    ) -> Spanned[Body]:
        content_length = self._content_length(headers)
        transfer_encoding = [h for h in headers if h.value.matches("transfer-encoding")]

        if content_length is not None:
            return self._fixed_length_body(cursor, content_length)
        if transfer_encoding:
            if not self._is_chunked(transfer_encoding):
                last = transfer_encoding[-1].value.value
                raise unexpected_token(
                    last.start, "chunked as the final transfer coding", last.value[:16],
                )
            return self._chunked.decode(cursor)
        return Spanned(EmptyBody(), Span.empty_at(cursor.offset))

    def _response_body(
        self,
        cursor: Cursor,
        headers: Tuple[Spanned[HeaderField], ...],
        status: int,
        framing_hint: FramingHint,
    ) -> Spanned[Body]:
        content_length = self._content_length(headers)
        if (
            100 <= status < 200
            or status in NO_BODY_STATUSES
            or framing_hint is FramingHint.HEAD_RESPONSE
        ):
            return Spanned(EmptyBody(), Span.empty_at(cursor.offset))

        transfer_encoding = [h for h in headers if h.value.matches("transfer-encoding")]

        if content_length is not None:
            return self._fixed_length_body(cursor, content_length)
        if transfer_encoding and self._is_chunked(transfer_encoding):
            return self._chunked.decode(cursor)
        if framing_hint is FramingHint.READ_TO_CLOSE:
            rest = cursor.take(cursor.remaining)
            return Spanned(ToEndBody(rest.span), rest.span)
        if cursor.at_end():
            return Spanned(EmptyBody(), Span.empty_at(cursor.offset))
        raise ParseError(
            "response body has no Content-Length or chunked framing "
            "and the connection is not known to be closed",
            ErrorKind.UNFRAMED_BODY,
            cursor.offset,
        )

    def _fixed_length_body(self, cursor: Cursor, length: int) -> Spanned[Body]:
        data = cursor.take(length)
        return Spanned(ContentLengthBody(length, data.span), data.span)

    def _content_length(self, headers: Tuple[Spanned[HeaderField], ...]) -> Optional[int]:
        """
        Resolve the Content-Length of a message, or None if absent.

        Raises:
            ParseError: AMBIGUOUS_FRAMING if Transfer-Encoding is also
                        present or if Content-Length values disagree,
                        UNEXPECTED_TOKEN for a non-decimal value.
        """
        lengths = [h for h in headers if h.value.matches("content-length")]
        if not lengths:
            return None

        encodings = [h for h in headers if h.value.matches("transfer-encoding")]
        if encodings:
            second = max(lengths[0], encodings[0], key=lambda h: h.start)
            raise ParseError(
                "message has both Content-Length and Transfer-Encoding",
                ErrorKind.AMBIGUOUS_FRAMING,
                second.start,
            )

        resolved: Optional[int] = None
        for header in lengths:
            value = header.value.value
            for item in value.value.split(b","):
                item = item.strip(b" \t")
                if not item or not item.isdigit():
                    raise unexpected_token(value.start, "decimal Content-Length", value.value[:16])
                length = int(item)
                if resolved is not None and length != resolved:
                    raise ParseError(
                        f"conflicting Content-Length values {resolved} and {length}",
                        ErrorKind.AMBIGUOUS_FRAMING,
                        header.start,
                    )
                resolved = length
        return resolved

    @staticmethod
    def _is_chunked(encodings: list[Spanned[HeaderField]]) -> bool:
        codings = [
            coding.strip(b" \t").lower()
            for header in encodings
            for coding in header.value.value.value.split(b",")
        ]
        return bool(codings) and codings[-1] == b"chunked"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def parse_http_request(
    buffer: Buffer,
    *,
    offset: int = 0,
    config: Optional[ParserConfig] = None,
) -> Spanned[Request]:
    """Parse a single HTTP request from buffer."""
    return HttpParser(config).parse_request(buffer, offset)


def parse_http_response(
    buffer: Buffer,
    framing_hint: FramingHint = FramingHint.LENGTH_REQUIRED,
    *,
    offset: int = 0,
    config: Optional[ParserConfig] = None,
) -> Spanned[Response]:
    """Parse a single HTTP response from buffer."""
    return HttpParser(config).parse_response(buffer, framing_hint, offset)


def iter_requests(
    buffer: Buffer,
    *,
    config: Optional[ParserConfig] = None,
) -> Iterator[Spanned[Request]]:
    """
    Parse back-to-back (pipelined) requests until the buffer is exhausted.

    Each request is parsed at the offset where the previous one ended, so
    all spans are absolute positions in buffer.
    """
    parser = HttpParser(config)
    offset = 0
    while offset < len(buffer):
        request = parser.parse_request(buffer, offset)
        yield request
        offset = request.end
