"""
=============================================================================
SPANPARSE - Span-Tracking Parsers for HTTP and JSON
=============================================================================

spanparse parses HTTP/1.1 messages and JSON documents and records, for
every element it recognises, the exact byte range it occupied in the input.
The result is a tree of Spanned values: the parsed value plus its span.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   buffer ──► Cursor ──► grammar (combinators) ──► Spanned tree      │
    │                                                                      │
    │   span.extract(buffer)  →  the exact original bytes of any node     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Because spans point into the original buffer, callers can pull out the
exact bytes of a header value, a JSON field or a whole message without
re-serialising anything. That matters wherever byte-exact reconstruction
or commitments over sub-ranges of an input are needed.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    spanparse/
    ├── __init__.py          # This file - package exports
    ├── config.py            # ParserConfig dataclass, setup_logging()
    ├── core/                # Grammar-independent machinery
    │   ├── errors.py        # ErrorKind, ParseError hierarchy
    │   ├── span.py          # Span, Spanned
    │   ├── cursor.py        # Cursor + primitive matchers
    │   └── combinators.py   # sequence, optional, repeat, alternation
    ├── http/                # HTTP/1.1 grammar
    │   ├── types.py         # Request, Response, HeaderField, bodies
    │   ├── chunked.py       # Chunked transfer coding state machine
    │   └── parser.py        # HttpParser
    └── json/                # JSON grammar
        ├── types.py         # JSON value tree
        ├── parser.py        # JsonParser
        └── visit.py         # JsonVisitor

=============================================================================
QUICK START
=============================================================================

    from spanparse import parse_http_request, parse_json

    data = b"POST /api HTTP/1.1\\r\\nContent-Length: 8\\r\\n\\r\\n{\\"a\\": 1}"

    message = parse_http_request(data)
    request = message.value
    request.method.value                          # "POST"
    request.header("content-length").extract(data)
                                                  # b"Content-Length: 8\\r\\n"

    body = request.body.span.extract(data)        # b'{"a": 1}'
    doc = parse_json(body)
    doc.value.get("a").span                       # Span(6, 7)

=============================================================================
"""

from .config import ParserConfig, setup_logging
from .core import (
    ErrorKind,
    ParseError,
    SpanError,
    HttpParseError,
    JsonParseError,
    Span,
    Spanned,
    Cursor,
    sequence,
    optional,
    repeat,
    alternation,
)
from .http import (
    FramingHint,
    HeaderField,
    Chunk,
    EmptyBody,
    ContentLengthBody,
    ChunkedBody,
    ToEndBody,
    Request,
    Response,
    HttpParser,
    parse_http_request,
    parse_http_response,
    iter_requests,
)
from .json import (
    JsonNull,
    JsonBool,
    JsonNumber,
    JsonString,
    JsonArray,
    JsonMember,
    JsonObject,
    JsonParser,
    JsonVisitor,
    parse_json,
    to_python,
)

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "ParserConfig",
    "setup_logging",

    # Errors
    "ErrorKind",
    "ParseError",
    "SpanError",
    "HttpParseError",
    "JsonParseError",

    # Core
    "Span",
    "Spanned",
    "Cursor",
    "sequence",
    "optional",
    "repeat",
    "alternation",

    # HTTP
    "FramingHint",
    "HeaderField",
    "Chunk",
    "EmptyBody",
    "ContentLengthBody",
    "ChunkedBody",
    "ToEndBody",
    "Request",
    "Response",
    "HttpParser",
    "parse_http_request",
    "parse_http_response",
    "iter_requests",

    # JSON
    "JsonNull",
    "JsonBool",
    "JsonNumber",
    "JsonString",
    "JsonArray",
    "JsonMember",
    "JsonObject",
    "JsonParser",
    "JsonVisitor",
    "parse_json",
    "to_python",
]
