"""
=============================================================================
HTTP/1.1 MESSAGE PARSING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ PARSER (parser.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   b"GET /users HTTP/1.1\r\nHost: ...\r\n\r\n"                │
    │ Output:  Spanned[Request] with a span on every element              │
    │                                                                      │
    │   • Request line / status line                                      │
    │   • Header fields (case-insensitive lookup, original bytes kept)    │
    │   • Body framing: Content-Length, chunked, read-to-close            │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ CHUNKED DECODER (chunked.py)                                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │ CHUNK_SIZE → CHUNK_DATA → ... → TRAILER → DONE                      │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ MESSAGE TREE (types.py)                                             │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Request, Response, HeaderField, Chunk, body variants, FramingHint   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .types import (
    FramingHint,
    HeaderField,
    Chunk,
    Body,
    EmptyBody,
    ContentLengthBody,
    ChunkedBody,
    ToEndBody,
    Request,
    Response,
)
from .chunked import ChunkedDecoder, ChunkState
from .parser import (
    HttpParser,
    parse_http_request,
    parse_http_response,
    iter_requests,
)

__all__ = [
    # Message tree
    "FramingHint",
    "HeaderField",
    "Chunk",
    "Body",
    "EmptyBody",
    "ContentLengthBody",
    "ChunkedBody",
    "ToEndBody",
    "Request",
    "Response",

    # Chunked coding
    "ChunkedDecoder",
    "ChunkState",

    # Parsing
    "HttpParser",
    "parse_http_request",
    "parse_http_response",
    "iter_requests",
]
