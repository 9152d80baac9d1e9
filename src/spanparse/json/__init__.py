"""
Spanned JSON parsing: value tree, recursive-descent parser and visitor.
"""

from .types import (
    JsonValue,
    JsonNull,
    JsonBool,
    JsonNumber,
    JsonString,
    JsonArray,
    JsonMember,
    JsonObject,
    to_python,
)
from .parser import JsonParser, parse_json
from .visit import JsonVisitor

__all__ = [
    # Value tree
    "JsonValue",
    "JsonNull",
    "JsonBool",
    "JsonNumber",
    "JsonString",
    "JsonArray",
    "JsonMember",
    "JsonObject",
    "to_python",

    # Parsing
    "JsonParser",
    "parse_json",

    # Traversal
    "JsonVisitor",
]
