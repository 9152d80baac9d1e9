"""
=============================================================================
SPANS
=============================================================================

A Span is a half-open byte range [start, end) over some input buffer.

    buffer:   G E T   / i n d e x   H T T P / 1 . 1 \r \n
    offset:   0 1 2 3 4 5 6 7 8 9 ...
              └─┬─┘   └────┬────┘
         Span(0, 3)     Span(4, 10)

Spans hold two integers and nothing else. They never reference the buffer
they were produced from, so they can be copied, hashed, stored and compared
freely. To get bytes back, combine a span with the original buffer:

    span.view(buffer)      # zero-copy memoryview
    span.extract(buffer)   # bytes copy

The caller owns the buffer; spans stay valid for as long as it does.

=============================================================================
SPANNED VALUES
=============================================================================

Spanned[T] pairs a parsed value with the span it was parsed from:

    Spanned(value="GET", span=Span(0, 3))

The span covers exactly the consumed bytes, no leading or trailing bytes
that did not contribute to the value.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from .errors import ErrorKind, SpanError

T = TypeVar("T")
U = TypeVar("U")

Buffer = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True, order=True)
class Span:
    """Half-open byte range [start, end)."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.start > self.end:
            raise SpanError(
                f"invalid span range {self.start}..{self.end}",
                ErrorKind.INVALID_RANGE,
                self.start,
            )

    @classmethod
    def empty_at(cls, offset: int) -> "Span":
        """Zero-length span positioned at offset."""
        return cls(offset, offset)

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, other: "Span") -> bool:
        """True if other lies entirely within this span."""
        return self.start <= other.start and other.end <= self.end

    def disjoint(self, other: "Span") -> bool:
        """True if the two ranges share no byte."""
        return self.end <= other.start or other.end <= self.start

    def union(self, other: "Span") -> "Span":
        """
        Smallest span covering both.

        The two spans must overlap or touch; a gap between them would make
        the union claim bytes neither span consumed.

        Raises:
            SpanError: NON_CONTIGUOUS if there is a gap between the spans.
        """
        if self.end < other.start or other.end < self.start:
            raise SpanError(
                f"cannot union non-contiguous spans {self} and {other}",
                ErrorKind.NON_CONTIGUOUS,
                min(self.end, other.end),
            )
        return Span(min(self.start, other.start), max(self.end, other.end))

    def shift(self, distance: int) -> "Span":
        """Return this span moved right by distance bytes."""
        return Span(self.start + distance, self.end + distance)

    def relative_to(self, outer: "Span") -> "Span":
        """
        Re-base this span onto an already-sliced outer span.

        outer.extract(buf)[inner.relative_to(outer).as_slice()] yields the
        same bytes as inner.extract(buf).
        """
        if not outer.contains(self):
            raise SpanError(
                f"{self} is not contained in {outer}",
                ErrorKind.INVALID_RANGE,
                self.start,
            )
        return Span(self.start - outer.start, self.end - outer.start)

    def as_slice(self) -> slice:
        return slice(self.start, self.end)

    def view(self, buffer: Buffer) -> memoryview:
        """Zero-copy view of the spanned bytes."""
        self._check_bounds(buffer)
        return memoryview(buffer)[self.start:self.end]

    def extract(self, buffer: Buffer) -> bytes:
        """Copy of the spanned bytes."""
        self._check_bounds(buffer)
        return bytes(buffer[self.start:self.end])

    def _check_bounds(self, buffer: Buffer) -> None:
        if self.end > len(buffer):
            raise SpanError(
                f"{self} exceeds buffer of {len(buffer)} bytes",
                ErrorKind.INVALID_RANGE,
                self.end,
            )

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


@dataclass(frozen=True)
class Spanned(Generic[T]):
    """A value together with the span of bytes it was parsed from."""

    value: T
    span: Span

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    def map(self, func: Callable[[T], U]) -> "Spanned[U]":
        """Transform the value; the span is unchanged."""
        return Spanned(func(self.value), self.span)

    def extract(self, buffer: Buffer) -> bytes:
        return self.span.extract(buffer)

    def view(self, buffer: Buffer) -> memoryview:
        return self.span.view(buffer)
