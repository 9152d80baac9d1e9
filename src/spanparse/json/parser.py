"""
=============================================================================
JSON PARSER
=============================================================================

Recursive-descent JSON parser (RFC 8259) that produces a spanned value
tree instead of plain Python objects.

=============================================================================
SPAN RULES
=============================================================================

    buffer:   ␣␣{ "a" : [ 1 , 2 ] }␣␣
                └──────────────────┘    object span: brace to brace,
                                        inner whitespace included
                  └─┘                   key span: raw text with quotes
                        └───────┘       array span: bracket to bracket
                          └┘            value span: the numeral only

    - A scalar's span covers exactly its source text, never surrounding
      whitespace.
    - A container's span runs from its opening to its closing delimiter,
      so everything between (whitespace, commas, colons) is covered.
    - A string's span covers the raw, still-escaped source text including
      both quotes; the decoded text is the value.

Slicing every span back out of the buffer therefore reproduces the
document byte for byte.

=============================================================================
NESTING LIMIT
=============================================================================

Arrays and objects recurse. Adversarial input like "[[[[[[..." would
otherwise exhaust the interpreter stack, so nesting deeper than
ParserConfig.max_json_depth fails with LIMIT_EXCEEDED.

=============================================================================
"""

import logging
from decimal import Decimal
from typing import Optional, Union

from ..config import DEFAULT_CONFIG, ParserConfig
from ..core.combinators import (
    alternation,
    literal,
    one_of,
    optional,
    sequence,
    take_while1,
)
from ..core.cursor import Cursor
from ..core.errors import (
    ErrorKind,
    JsonParseError,
    ParseError,
    unexpected_eof,
    unexpected_token,
)
from ..core.span import Buffer, Spanned
from .types import (
    JsonArray,
    JsonBool,
    JsonMember,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

logger = logging.getLogger(__name__)

WHITESPACE = b" \t\n\r"
DIGITS = b"0123456789"
HEX_DIGITS = b"0123456789abcdefABCDEF"

SIMPLE_ESCAPES = {
    ord('"'): '"',
    ord("\\"): "\\",
    ord("/"): "/",
    ord("b"): "\b",
    ord("f"): "\f",
    ord("n"): "\n",
    ord("r"): "\r",
    ord("t"): "\t",
}


def _is_digit(b: int) -> bool:
    return 0x30 <= b <= 0x39


def _is_plain_string_byte(b: int) -> bool:
    # Anything but the closing quote, a backslash or a control character
    return b != 0x22 and b != 0x5C and b >= 0x20


# number = [ "-" ] int [ frac ] [ exp ]
_minus = optional(literal(b"-"))
_int_part = alternation(
    literal(b"0", "digit"),
    sequence(one_of(b"123456789", "digit"), lambda c: c.take_while(_is_digit)),
)
_frac = sequence(literal(b".", "'.'"), take_while1(_is_digit, "digit after '.'"))
_exp = sequence(
    one_of(b"eE", "exponent"),
    optional(one_of(b"+-", "exponent sign")),
    take_while1(_is_digit, "exponent digit"),
)


class JsonParser:
    """
    Parses JSON documents into spanned value trees.

    Stateless apart from its configuration; safe to share between threads.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or DEFAULT_CONFIG

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def parse(
        self,
        buffer: Buffer,
        allow_trailing_data: Optional[bool] = None,
    ) -> Spanned[JsonValue]:
        """
        Parse a complete JSON document.

        Args:
            buffer: UTF-8 encoded JSON text. bytes is parsed in place;
                a bytearray or memoryview is snapshotted once.
            allow_trailing_data: Overrides ParserConfig.allow_trailing_data.
                If False, non-whitespace after the value fails with
                TRAILING_DATA. If True, it is left unconsumed; the returned
                span's end tells the caller where the value stopped.

        Raises:
            JsonParseError: If the document is not valid JSON.
        """
        if allow_trailing_data is None:
            allow_trailing_data = self.config.allow_trailing_data

        try:
            cursor = Cursor(buffer)
            with cursor.transaction():
                value = self.parse_from(cursor)
                if not allow_trailing_data:
                    cursor.take_while(lambda b: b in WHITESPACE)
                    if not cursor.at_end():
                        raise ParseError(
                            "trailing data after JSON value",
                            ErrorKind.TRAILING_DATA,
                            cursor.offset,
                        )
        except ParseError as err:
            logger.debug("JSON parse failed: %s at offset %d", err.kind.name, err.offset)
            raise JsonParseError.from_error(err) from err

        logger.debug("Parsed JSON %s spanning %s", type(value.value).__name__, value.span)
        return value

    def parse_from(self, cursor: Cursor) -> Spanned[JsonValue]:
        """
        Parse one value at the cursor, skipping leading whitespace.

        Leaves the cursor directly after the value. Useful for JSON
        embedded in a larger buffer, e.g. an HTTP body.
        """
        with cursor.transaction():
            self._skip_whitespace(cursor)
            return self._parse_value(cursor, 0)

    # =========================================================================
    # VALUES
    # =========================================================================

    def _skip_whitespace(self, cursor: Cursor) -> None:
        cursor.take_while(lambda b: b in WHITESPACE)

    def _parse_value(self, cursor: Cursor, depth: int) -> Spanned[JsonValue]:
        b = cursor.peek_byte()
        if b is None:
            raise unexpected_eof(cursor.offset, "JSON value")

        if b == ord("{"):
            return self._parse_object(cursor, depth + 1)
        if b == ord("["):
            return self._parse_array(cursor, depth + 1)
        if b == ord('"'):
            return self._parse_string(cursor).map(JsonString)
        if b == ord("t"):
            return cursor.expect_literal(b"true", "'true'").map(lambda _: JsonBool(True))
        if b == ord("f"):
            return cursor.expect_literal(b"false", "'false'").map(lambda _: JsonBool(False))
        if b == ord("n"):
            return cursor.expect_literal(b"null", "'null'").map(lambda _: JsonNull())
        if b == ord("-") or _is_digit(b):
            return self._parse_number(cursor)

        raise unexpected_token(cursor.offset, "JSON value", bytes((b,)))

    def _parse_number(self, cursor: Cursor) -> Spanned[JsonNumber]:
        with cursor.transaction() as start:
            _minus(cursor)
            _int_part(cursor)
            is_float = False
            if cursor.peek_byte() == ord("."):
                _frac(cursor)
                is_float = True
            if cursor.peek_byte() in (ord("e"), ord("E")):
                _exp(cursor)
                is_float = True

            span = cursor.span_from(start)
            text = span.extract(cursor.buffer).decode("ascii")
            number: Union[int, float, Decimal]
            if is_float:
                number = float(text)
            else:
                try:
                    number = int(text)
                except ValueError:
                    # Past the interpreter's int/str digit limit
                    number = Decimal(text)
            return Spanned(JsonNumber(number, text), span)

    # =========================================================================
    # STRINGS
    # =========================================================================

    def _parse_string(self, cursor: Cursor) -> Spanned[str]:
        """
        Parse a quoted string, decoding escapes.

        The span covers the raw source text, quotes included.
        """
        with cursor.transaction() as start:
            cursor.expect_literal(b'"', "'\"'")
            parts = []
            while True:
                run = cursor.take_while(_is_plain_string_byte)
                if not run.span.is_empty:
                    parts.append(self._decode_utf8(run))

                b = cursor.peek_byte()
                if b is None:
                    raise unexpected_eof(cursor.offset, "closing '\"'")
                if b == ord('"'):
                    cursor.take(1)
                    break
                if b == ord("\\"):
                    parts.append(self._parse_escape(cursor))
                    continue
                raise unexpected_token(cursor.offset, "string character", bytes((b,)))

            return Spanned("".join(parts), cursor.span_from(start))

    @staticmethod
    def _decode_utf8(run: Spanned[bytes]) -> str:
        # Runs only break at ASCII bytes, which never occur inside a
        # multi-byte UTF-8 sequence, so decoding per run is safe.
        try:
            return run.value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise unexpected_token(
                run.start + exc.start, "valid UTF-8", run.value[exc.start:exc.start + 4],
            ) from exc

    def _parse_escape(self, cursor: Cursor) -> str:
        escape_start = cursor.offset
        cursor.take(1)

        b = cursor.peek_byte()
        if b is None:
            raise unexpected_eof(cursor.offset, "escape sequence")
        if b in SIMPLE_ESCAPES:
            cursor.take(1)
            return SIMPLE_ESCAPES[b]
        if b != ord("u"):
            raise unexpected_token(escape_start, "escape sequence", b"\\" + bytes((b,)))

        cursor.take(1)
        code = self._read_hex4(cursor)

        if 0xDC00 <= code <= 0xDFFF:
            raise unexpected_token(escape_start, "leading surrogate before trailing surrogate")

        if 0xD800 <= code <= 0xDBFF:
            # A leading surrogate must be followed by an escaped trailing one
            follow = cursor.buffer[cursor.offset:cursor.offset + 2]
            if follow != b"\\u":
                if len(follow) < 2 and b"\\u".startswith(follow):
                    raise unexpected_eof(cursor.offset, "trailing surrogate")
                raise unexpected_token(escape_start, "trailing surrogate after leading surrogate")
            cursor.take(2)
            low = self._read_hex4(cursor)
            if not 0xDC00 <= low <= 0xDFFF:
                raise unexpected_token(escape_start, "trailing surrogate after leading surrogate")
            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)

        return chr(code)

    @staticmethod
    def _read_hex4(cursor: Cursor) -> int:
        with cursor.transaction() as start:
            for _ in range(4):
                cursor.expect_byte(HEX_DIGITS, "hex digit")
            return int(cursor.buffer[start:cursor.offset], 16)

    # =========================================================================
    # CONTAINERS
    # =========================================================================

    def _check_depth(self, cursor: Cursor, depth: int) -> None:
        if depth > self.config.max_json_depth:
            raise ParseError(
                f"nesting deeper than {self.config.max_json_depth} levels",
                ErrorKind.LIMIT_EXCEEDED,
                cursor.offset,
                f"nesting depth <= {self.config.max_json_depth}",
            )

    def _parse_array(self, cursor: Cursor, depth: int) -> Spanned[JsonArray]:
        self._check_depth(cursor, depth)
        with cursor.transaction() as start:
            cursor.expect_literal(b"[")
            items = []

            self._skip_whitespace(cursor)
            if cursor.peek_byte() == ord("]"):
                cursor.take(1)
                return Spanned(JsonArray(()), cursor.span_from(start))

            while True:
                self._skip_whitespace(cursor)
                items.append(self._parse_value(cursor, depth))
                self._skip_whitespace(cursor)
                if self._end_of_container(cursor, ord("]"), "',' or ']'"):
                    break

            return Spanned(JsonArray(tuple(items)), cursor.span_from(start))

    def _parse_object(self, cursor: Cursor, depth: int) -> Spanned[JsonObject]:
        self._check_depth(cursor, depth)
        with cursor.transaction() as start:
            cursor.expect_literal(b"{")
            members = []

            self._skip_whitespace(cursor)
            if cursor.peek_byte() == ord("}"):
                cursor.take(1)
                return Spanned(JsonObject(()), cursor.span_from(start))

            while True:
                self._skip_whitespace(cursor)
                b = cursor.peek_byte()
                if b is None:
                    raise unexpected_eof(cursor.offset, "object key")
                if b != ord('"'):
                    raise unexpected_token(cursor.offset, "object key string", bytes((b,)))
                key = self._parse_string(cursor)

                self._skip_whitespace(cursor)
                if cursor.at_end():
                    raise unexpected_eof(cursor.offset, "':'")
                cursor.expect_literal(b":", "':'")

                self._skip_whitespace(cursor)
                value = self._parse_value(cursor, depth)
                members.append(JsonMember(key, value))

                self._skip_whitespace(cursor)
                if self._end_of_container(cursor, ord("}"), "',' or '}'"):
                    break

            return Spanned(JsonObject(tuple(members)), cursor.span_from(start))

    @staticmethod
    def _end_of_container(cursor: Cursor, closing: int, expected: str) -> bool:
        """Consume ',' (returns False) or the closing delimiter (returns True)."""
        b = cursor.peek_byte()
        if b is None:
            raise unexpected_eof(cursor.offset, expected)
        if b == ord(","):
            cursor.take(1)
            return False
        if b == closing:
            cursor.take(1)
            return True
        raise unexpected_token(cursor.offset, expected, bytes((b,)))


def parse_json(
    buffer: Buffer,
    *,
    config: Optional[ParserConfig] = None,
    allow_trailing_data: Optional[bool] = None,
) -> Spanned[JsonValue]:
    """Parse a JSON document from buffer."""
    return JsonParser(config).parse(buffer, allow_trailing_data)
