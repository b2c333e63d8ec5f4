"""
Tagged-union representation of JSON documents.

Schema definitions and candidate payloads are arbitrary JSON. Rather than
probing raw ``json.loads`` output with ad-hoc isinstance checks, the
validation engine works on an explicit union of six variants:

    JsonNull | JsonBool | JsonNumber | JsonString | JsonArray | JsonObject

Invariants:
    - Every variant is immutable (frozen dataclass, tuples for containers)
    - Python bools always become JsonBool, never JsonNumber
    - Numbers are finite; NaN and Infinity are rejected as non-JSON
    - Over-deep nesting is a JsonDecodeError, never a RecursionError
    - JsonObject preserves key order of the source document

Example:
    >>> value = parse_json('{"amount": 10, "tags": ["a"]}')
    >>> value.get("amount")
    JsonNumber(value=10)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional, Tuple, Union


class JsonDecodeError(ValueError):
    """Raised when text cannot be decoded into a JsonValue."""
    pass


@dataclass(frozen=True)
class JsonNull:
    """JSON ``null``."""

    type_name = "null"

    def to_python(self) -> None:
        return None


@dataclass(frozen=True)
class JsonBool:
    """JSON ``true``/``false``."""

    value: bool

    type_name = "boolean"

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class JsonNumber:
    """Any JSON number; integers stay ``int``, the rest are ``float``."""

    value: Union[int, float]

    type_name = "number"

    def to_python(self) -> Union[int, float]:
        return self.value


@dataclass(frozen=True)
class JsonString:
    """JSON string."""

    value: str

    type_name = "string"

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class JsonArray:
    """JSON array of JsonValues."""

    items: Tuple[JsonValue, ...] = ()

    type_name = "array"

    def __iter__(self) -> Iterator[JsonValue]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class JsonObject:
    """JSON object as an ordered tuple of (key, JsonValue) pairs."""

    members: Tuple[Tuple[str, JsonValue], ...] = ()

    type_name = "object"

    def get(self, key: str) -> Optional[JsonValue]:
        for member_key, member_value in self.members:
            if member_key == key:
                return member_value
        return None

    def __contains__(self, key: object) -> bool:
        return any(member_key == key for member_key, _ in self.members)

    def keys(self) -> Iterator[str]:
        return (key for key, _ in self.members)

    def items(self) -> Iterator[Tuple[str, JsonValue]]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def to_python(self) -> dict:
        return {key: value.to_python() for key, value in self.members}


JsonValue = Union[JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject]

JSON_NULL = JsonNull()


def from_python(value: Any) -> JsonValue:
    """Convert a decoded Python value into a JsonValue.

    Args:
        value: Result of ``json.loads`` or an equivalent Python structure

    Returns:
        The corresponding JsonValue variant

    Raises:
        JsonDecodeError: If the value is not representable as JSON
            or is nested too deeply
    """
    try:
        return _convert(value)
    except RecursionError:
        raise JsonDecodeError("document nested too deeply") from None


def _convert(value: Any) -> JsonValue:
    if value is None:
        return JSON_NULL
    # bool must be checked before int: bool is an int subclass
    if isinstance(value, bool):
        return JsonBool(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise JsonDecodeError(f"non-finite number: {value}")
        return JsonNumber(value)
    if isinstance(value, str):
        return JsonString(value)
    if isinstance(value, (list, tuple)):
        return JsonArray(tuple(_convert(item) for item in value))
    if isinstance(value, Mapping):
        members = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise JsonDecodeError(f"object keys must be strings, got {type(key).__name__}")
            members.append((key, _convert(item)))
        return JsonObject(tuple(members))
    if isinstance(value, (JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject)):
        return value
    raise JsonDecodeError(f"unsupported JSON type: {type(value).__name__}")


def _reject_constant(name: str) -> Any:
    raise JsonDecodeError(f"non-standard JSON constant: {name}")


def parse_json(text: Union[str, bytes, bytearray]) -> JsonValue:
    """Parse JSON text into a JsonValue.

    NaN, Infinity and -Infinity are rejected; they are not JSON.

    Args:
        text: JSON document as str or UTF-8 bytes

    Returns:
        Parsed JsonValue

    Raises:
        JsonDecodeError: If the text is not valid JSON or is nested too deeply
    """
    try:
        decoded = json.loads(text, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise JsonDecodeError(str(e)) from e
    except RecursionError:
        raise JsonDecodeError("document nested too deeply") from None
    return from_python(decoded)


def to_json_value(value: Any) -> JsonValue:
    """Coerce text, bytes, a JsonValue, or a decoded value into a JsonValue."""
    if isinstance(value, (str, bytes, bytearray)):
        return parse_json(value)
    return from_python(value)
