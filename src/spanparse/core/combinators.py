"""
=============================================================================
COMBINATORS
=============================================================================

A matcher is any callable that takes a Cursor and either returns a
Spanned result (advancing the cursor) or raises ParseError (leaving the
cursor where it was). Combinators build bigger matchers out of smaller ones:

    ┌──────────────────────────────────────────────────────────────────────┐
    │  sequence(a, b, c)     a then b then c           Spanned[tuple]      │
    │  optional(a)           a or nothing              Spanned | None      │
    │  repeat(a, min, max)   a, greedily, N times      Spanned[tuple]      │
    │  alternation(a, b)     first of a, b to match    Spanned[...]        │
    └──────────────────────────────────────────────────────────────────────┘

Example, an HTTP version:

    version = sequence(
        literal(b"HTTP/"),
        one_of(DIGITS, "digit"),
        literal(b"."),
        one_of(DIGITS, "digit"),
    )
    version(cursor)   # Spanned((...), Span(9, 17))

=============================================================================
BACKTRACKING
=============================================================================

Combinators never consume input when they fail as a whole. sequence(),
repeat() and alternation() take an explicit snapshot of the offset before
running and reset it on failure, so every alternation branch starts from
the original position.

When every branch of an alternation fails, the error from the branch that
got furthest into the input is reported (ties go to the later branch).
That is usually the branch the author of the input "meant".

=============================================================================
"""

from typing import Any, Callable, Optional

from .cursor import Cursor
from .errors import ErrorKind, ParseError, unexpected_eof, unexpected_token
from .span import Span, Spanned

Matcher = Callable[[Cursor], Spanned[Any]]


def sequence(*matchers: Matcher) -> Matcher:
    """Run matchers in order; the result value is the tuple of their results."""

    def match(cursor: Cursor) -> Spanned[tuple]:
        start = cursor.offset
        results = []
        try:
            for matcher in matchers:
                results.append(matcher(cursor))
        except ParseError:
            cursor.reset(start)
            raise
        return Spanned(tuple(results), cursor.span_from(start))

    return match


def optional(matcher: Matcher) -> Callable[[Cursor], Optional[Spanned[Any]]]:
    """Return the match, or None without consuming anything if it fails."""

    def match(cursor: Cursor) -> Optional[Spanned[Any]]:
        start = cursor.offset
        try:
            return matcher(cursor)
        except ParseError:
            cursor.reset(start)
            return None

    return match


def repeat(matcher: Matcher, min: int = 0, max: Optional[int] = None) -> Matcher:
    """
    Apply matcher greedily until it fails or max repetitions are reached.

    A repetition that succeeds without consuming input ends the loop,
    otherwise a zero-width matcher would repeat forever.

    Raises:
        ParseError: TOO_FEW_REPETITIONS when fewer than min matched.
    """
    if min < 0 or (max is not None and max < min):
        raise ValueError(f"invalid repetition bounds min={min} max={max}")

    def match(cursor: Cursor) -> Spanned[tuple]:
        start = cursor.offset
        items = []
        last_error: Optional[ParseError] = None
        while max is None or len(items) < max:
            before = cursor.offset
            try:
                item = matcher(cursor)
            except ParseError as err:
                last_error = err
                break
            items.append(item)
            if cursor.offset == before:
                break

        if len(items) < min:
            cursor.reset(start)
            offset = last_error.offset if last_error is not None else cursor.offset
            raise ParseError(
                f"expected at least {min} repetitions, matched {len(items)}",
                ErrorKind.TOO_FEW_REPETITIONS,
                offset,
                last_error.expected if last_error is not None else None,
            ) from last_error

        if not items:
            return Spanned((), Span.empty_at(start))
        return Spanned(tuple(items), Span(items[0].start, items[-1].end))

    return match


def alternation(*matchers: Matcher) -> Matcher:
    """First matcher to succeed wins; declaration order is the only priority."""
    if not matchers:
        raise ValueError("alternation() needs at least one matcher")

    def match(cursor: Cursor) -> Spanned[Any]:
        start = cursor.offset
        furthest: Optional[ParseError] = None
        for matcher in matchers:
            try:
                return matcher(cursor)
            except ParseError as err:
                cursor.reset(start)
                if furthest is None or err.offset >= furthest.offset:
                    furthest = err
        raise furthest

    return match


# =============================================================================
# LEAF MATCHERS
# =============================================================================
#
# Thin wrappers that turn Cursor primitives into matchers so grammars can
# be written as combinator expressions.
#

def literal(value: bytes, expected: Optional[str] = None) -> Matcher:
    def match(cursor: Cursor) -> Spanned[bytes]:
        return cursor.expect_literal(value, expected)

    return match


def one_of(charset: bytes, expected: str) -> Matcher:
    def match(cursor: Cursor) -> Spanned[bytes]:
        return cursor.expect_byte(charset, expected)

    return match


def take_while1(predicate: Callable[[int], bool], expected: str) -> Matcher:
    """Like Cursor.take_while, but at least one byte must match."""

    def match(cursor: Cursor) -> Spanned[bytes]:
        result = cursor.take_while(predicate)
        if result.span.is_empty:
            b = cursor.peek_byte()
            if b is None:
                raise unexpected_eof(cursor.offset, expected)
            raise unexpected_token(cursor.offset, expected, bytes((b,)))
        return result

    return match


def map_value(matcher: Matcher, func: Callable[[Any], Any]) -> Matcher:
    """Transform a matcher's value, keeping its span."""

    def match(cursor: Cursor) -> Spanned[Any]:
        return matcher(cursor).map(func)

    return match
