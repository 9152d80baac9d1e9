"""
=============================================================================
JSON TREE VISITOR
=============================================================================

Walks a spanned JSON tree, calling one hook per node type. Subclass and
override only the hooks you need; containers recurse by default.

Example: mask every number in a document without re-serialising it.

    class NumberMasker(JsonVisitor):
        def __init__(self, out: bytearray):
            self.out = out

        def visit_number(self, node):
            self.out[node.span.as_slice()] = b"9" * len(node.span)

    out = bytearray(src)
    NumberMasker(out).visit(parse_json(src))

    src:  {"foo": [42, 69]}
    out:  {"foo": [99, 99]}

Hooks receive the Spanned node, so both the decoded value (node.value)
and its position in the source (node.span) are available.

=============================================================================
"""

from ..core.span import Spanned
from .types import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)


class JsonVisitor:
    """Base class for JSON tree visitors. All hooks default to no-ops."""

    def visit(self, node: Spanned[JsonValue]) -> None:
        """Dispatch node to the hook for its type."""
        value = node.value
        if isinstance(value, JsonObject):
            self.visit_object(node)
        elif isinstance(value, JsonArray):
            self.visit_array(node)
        elif isinstance(value, JsonString):
            self.visit_string(node)
        elif isinstance(value, JsonNumber):
            self.visit_number(node)
        elif isinstance(value, JsonBool):
            self.visit_bool(node)
        elif isinstance(value, JsonNull):
            self.visit_null(node)
        else:
            raise TypeError(f"not a JSON value: {value!r}")

    def visit_object(self, node: Spanned[JsonObject]) -> None:
        for member in node.value.members:
            self.visit_key(member.key)
            self.visit(member.value)

    def visit_array(self, node: Spanned[JsonArray]) -> None:
        for item in node.value.items:
            self.visit(item)

    def visit_key(self, node: Spanned[str]) -> None:
        pass

    def visit_string(self, node: Spanned[JsonString]) -> None:
        pass

    def visit_number(self, node: Spanned[JsonNumber]) -> None:
        pass

    def visit_bool(self, node: Spanned[JsonBool]) -> None:
        pass

    def visit_null(self, node: Spanned[JsonNull]) -> None:
        pass
