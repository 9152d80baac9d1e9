"""
=============================================================================
JSON VALUE TREE
=============================================================================

Every node is wrapped in Spanned, so each value knows the exact raw text
it came from:

    {"name": "a\\n", "n": 1.5e3}
    │ └─┬──┘  └─┬─┘   └┬┘ └─┬─┘│
    │  key    value  key  value │
    └──────── JsonObject ───────┘

    JsonString.value is the DECODED text ("a" + newline), while the span
    covers the RAW source text including quotes and escapes.

    JsonNumber keeps both the parsed number and the original numeral
    text, since "1.50" and "1.5" parse to the same float. Integers too long
    for int() (sys.get_int_max_str_digits) become an exact Decimal.

Object members are kept in source order and duplicate keys are NOT merged.
Deciding what a duplicate key means is up to the caller.

=============================================================================
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterator, Optional, Tuple, Union

from ..core.span import Spanned


@dataclass(frozen=True)
class JsonNull:
    pass


@dataclass(frozen=True)
class JsonBool:
    value: bool


@dataclass(frozen=True)
class JsonNumber:
    value: Union[int, float, Decimal]
    text: str


@dataclass(frozen=True)
class JsonString:
    value: str


@dataclass(frozen=True)
class JsonArray:
    items: Tuple["Spanned[JsonValue]", ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator["Spanned[JsonValue]"]:
        return iter(self.items)


@dataclass(frozen=True)
class JsonMember:
    key: Spanned[str]
    value: "Spanned[JsonValue]"


@dataclass(frozen=True)
class JsonObject:
    members: Tuple[JsonMember, ...]

    def __len__(self) -> int:
        return len(self.members)

    def keys(self) -> list[str]:
        return [m.key.value for m in self.members]

    def get(self, key: str) -> Optional["Spanned[JsonValue]"]:
        """Value of the first member named key, or None."""
        for member in self.members:
            if member.key.value == key:
                return member.value
        return None

    def get_all(self, key: str) -> list["Spanned[JsonValue]"]:
        """Values of every member named key, in source order."""
        return [m.value for m in self.members if m.key.value == key]


JsonValue = Union[JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject]


def to_python(node: Union["Spanned[JsonValue]", JsonValue]) -> Any:
    """
    Convert a (spanned) JSON tree to plain Python values.

    Objects become dicts; with duplicate keys the last member wins, as
    with the standard library json module.
    """
    value = node.value if isinstance(node, Spanned) else node

    if isinstance(value, JsonNull):
        return None
    if isinstance(value, (JsonBool, JsonNumber, JsonString)):
        return value.value
    if isinstance(value, JsonArray):
        return [to_python(item) for item in value.items]
    if isinstance(value, JsonObject):
        return {m.key.value: to_python(m.value) for m in value.members}
    raise TypeError(f"not a JSON value: {value!r}")
