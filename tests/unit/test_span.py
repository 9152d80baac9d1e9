"""
Unit tests for Span and Spanned.
"""

import pytest

from spanparse.core.errors import ErrorKind, SpanError
from spanparse.core.span import Span, Spanned


class TestSpan:
    """Tests for the Span value type."""

    def test_new_span(self):
        """Test construction and length."""
        span = Span(2, 7)
        assert span.start == 2
        assert span.end == 7
        assert len(span) == 5
        assert span.is_empty is False

    def test_empty_span(self):
        """Test zero-length spans."""
        span = Span.empty_at(4)
        assert span == Span(4, 4)
        assert len(span) == 0
        assert span.is_empty is True

    def test_invalid_range(self):
        """Test that start > end is rejected."""
        with pytest.raises(SpanError) as exc_info:
            Span(5, 3)

        assert exc_info.value.kind is ErrorKind.INVALID_RANGE
        assert exc_info.value.offset == 5

    def test_negative_start_rejected(self):
        """Test that negative offsets are rejected."""
        with pytest.raises(SpanError):
            Span(-1, 3)

    def test_span_error_is_value_error(self):
        """Test SpanError can be caught as ValueError."""
        with pytest.raises(ValueError):
            Span(3, 1)

    def test_contains(self):
        """Test containment checks."""
        outer = Span(0, 10)
        assert outer.contains(Span(2, 5))
        assert outer.contains(Span(0, 10))
        assert outer.contains(Span(10, 10))
        assert not outer.contains(Span(5, 11))
        assert not Span(2, 5).contains(outer)

    def test_disjoint(self):
        """Test disjointness checks (half-open ranges)."""
        assert Span(0, 3).disjoint(Span(3, 6))
        assert Span(3, 6).disjoint(Span(0, 3))
        assert not Span(0, 4).disjoint(Span(3, 6))

    def test_union_overlapping(self):
        """Test union of overlapping spans."""
        assert Span(0, 4).union(Span(2, 8)) == Span(0, 8)

    def test_union_adjacent(self):
        """Test union of touching spans."""
        assert Span(5, 8).union(Span(0, 5)) == Span(0, 8)

    def test_union_non_contiguous(self):
        """Test that a gap between spans is rejected."""
        with pytest.raises(SpanError) as exc_info:
            Span(0, 3).union(Span(5, 8))

        assert exc_info.value.kind is ErrorKind.NON_CONTIGUOUS
        assert exc_info.value.offset == 3

    def test_shift(self):
        """Test moving a span."""
        assert Span(1, 4).shift(10) == Span(11, 14)

    def test_extract_and_view(self):
        """Test slicing the buffer with a span."""
        buffer = b"hello world"
        span = Span(6, 11)

        assert span.extract(buffer) == b"world"
        view = span.view(buffer)
        assert isinstance(view, memoryview)
        assert view == b"world"

    def test_extract_out_of_bounds(self):
        """Test that a span past the buffer end is rejected."""
        with pytest.raises(SpanError):
            Span(0, 20).extract(b"short")

    def test_relative_to_reslicing(self):
        """Test that re-slicing a nested span matches slicing the original."""
        buffer = b"GET /index HTTP/1.1\r\n"
        outer = Span(4, 19)
        inner = Span(11, 19)

        outer_bytes = outer.extract(buffer)
        relative = inner.relative_to(outer)

        assert relative == Span(7, 15)
        assert outer_bytes[relative.as_slice()] == inner.extract(buffer)

    def test_relative_to_requires_containment(self):
        """Test re-basing onto a span that does not contain this one."""
        with pytest.raises(SpanError):
            Span(0, 5).relative_to(Span(2, 4))

    def test_spans_are_hashable(self):
        """Test spans can be used as dict keys."""
        seen = {Span(0, 1): "a", Span(0, 1): "b"}
        assert len(seen) == 1


class TestSpanned:
    """Tests for Spanned values."""

    def test_map_keeps_span(self):
        """Test that map transforms the value but not the span."""
        spanned = Spanned(b"42", Span(3, 5))
        mapped = spanned.map(int)

        assert mapped.value == 42
        assert mapped.span == Span(3, 5)

    def test_start_end(self):
        """Test convenience accessors."""
        spanned = Spanned("x", Span(1, 2))
        assert spanned.start == 1
        assert spanned.end == 2

    def test_extract(self):
        """Test extracting the raw bytes of a spanned value."""
        buffer = b"a=123;"
        spanned = Spanned(123, Span(2, 5))
        assert spanned.extract(buffer) == b"123"
        assert spanned.view(buffer) == b"123"
