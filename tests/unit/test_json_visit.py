"""
Unit tests for the JSON visitor.
"""

import pytest

from spanparse import JsonVisitor, Span, Spanned, parse_json


class NumberMasker(JsonVisitor):
    """Overwrites every number in place."""

    def __init__(self, out: bytearray):
        self.out = out

    def visit_number(self, node):
        self.out[node.span.as_slice()] = b"9" * len(node.span)


class KeyCollector(JsonVisitor):
    def __init__(self):
        self.keys = []

    def visit_key(self, node):
        self.keys.append((node.value, node.span))


class TypeRecorder(JsonVisitor):
    def __init__(self):
        self.seen = []

    def visit_string(self, node):
        self.seen.append("string")

    def visit_number(self, node):
        self.seen.append("number")

    def visit_bool(self, node):
        self.seen.append("bool")

    def visit_null(self, node):
        self.seen.append("null")


class TestJsonVisitor:
    """Tests for JsonVisitor traversal."""

    def test_mask_numbers(self):
        """Test rewriting numbers through their spans."""
        src = b'{"foo": [42, 69]}'
        out = bytearray(src)
        NumberMasker(out).visit(parse_json(src))

        assert bytes(out) == b'{"foo": [99, 99]}'

    def test_visit_keys(self):
        """Test that keys are visited with their spans."""
        collector = KeyCollector()
        collector.visit(parse_json(b'{"a": {"b": 1}}'))

        assert collector.keys == [("a", Span(1, 4)), ("b", Span(7, 10))]

    def test_visit_order(self):
        """Test hooks fire in document order."""
        recorder = TypeRecorder()
        recorder.visit(parse_json(b'[1, "x", true, null, {"k": [false]}]'))

        assert recorder.seen == ["number", "string", "bool", "null", "bool"]

    def test_default_hooks_do_nothing(self):
        """Test the base visitor walks a tree without side effects."""
        JsonVisitor().visit(parse_json(b'{"a": [1, "b", null, true]}'))

    def test_rejects_non_json(self):
        """Test dispatch on a value that is not a JSON node."""
        with pytest.raises(TypeError):
            JsonVisitor().visit(Spanned(object(), Span(0, 0)))
