"""
Grammar-independent parsing core: spans, the cursor and combinators.
"""

from .errors import (
    ErrorKind,
    ParseError,
    SpanError,
    HttpParseError,
    JsonParseError,
)
from .span import Span, Spanned
from .cursor import Cursor
from .combinators import (
    Matcher,
    sequence,
    optional,
    repeat,
    alternation,
    literal,
    one_of,
    take_while1,
    map_value,
)

__all__ = [
    # Errors
    "ErrorKind",
    "ParseError",
    "SpanError",
    "HttpParseError",
    "JsonParseError",

    # Spans
    "Span",
    "Spanned",

    # Cursor
    "Cursor",

    # Combinators
    "Matcher",
    "sequence",
    "optional",
    "repeat",
    "alternation",
    "literal",
    "one_of",
    "take_while1",
    "map_value",
]
