"""
Validation engine for JSON-kind schemas.

The engine is a pure function of (schema definition, payload). It knows
nothing about the registry and can be used on its own:

    >>> result = validate_json('{"required": ["order_id"]}', "{}")
    >>> result.valid
    False

Supported keywords (a deliberate subset of JSON Schema):
- required: list of field names that must be present
- properties.<field>.type: string | number | boolean | object | array
- properties.<field>.enum: allowed values for string fields
- properties.<field>.minimum: lower bound for number fields

Anything else (format, nested properties, unknown types) passes silently.

Invariants:
    - Never raises on bad input; malformed documents yield a failing result
    - Error order is deterministic: required-field errors in declaration
      order, then property errors sorted by field name
    - Only keys present in both payload and properties are type-checked
"""

from __future__ import annotations

from typing import Any, List, Optional

from .json_value import (
    JsonArray,
    JsonBool,
    JsonDecodeError,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
    to_json_value,
)
from .types import SchemaKind, ValidationResult


def validate_for_kind(kind: SchemaKind, definition: Any, payload: Any) -> ValidationResult:
    """Validate a payload against a definition of the given kind.

    Protobuf and Avro are recognized but not implemented; they produce a
    failing result rather than an exception so callers handle every kind
    the same way.

    Args:
        kind: Format of the schema definition
        definition: Schema document (text, bytes, JsonValue or decoded)
        payload: Candidate payload (text, bytes, JsonValue or decoded)

    Returns:
        ValidationResult
    """
    if kind is SchemaKind.JSON:
        return validate_json(definition, payload)
    return ValidationResult.failure(
        (f"{kind.value} validation is not supported yet",),
        message="unsupported schema type",
    )


def validate_json(definition: Any, payload: Any) -> ValidationResult:
    """Validate a payload against a JSON-kind schema definition.

    Args:
        definition: Schema document (text, bytes, JsonValue or decoded)
        payload: Candidate payload (text, bytes, JsonValue or decoded)

    Returns:
        ValidationResult with every violation found
    """
    try:
        data = to_json_value(payload)
    except JsonDecodeError as e:
        return ValidationResult.failure((f"malformed payload: {e}",), message="malformed payload")
    if not isinstance(data, JsonObject):
        return ValidationResult.failure(
            (f"malformed payload: expected a JSON object, got {data.type_name}",),
            message="malformed payload",
        )

    try:
        schema = to_json_value(definition)
    except JsonDecodeError as e:
        return ValidationResult.failure((f"malformed schema: {e}",), message="malformed schema")
    if not isinstance(schema, JsonObject):
        return ValidationResult.failure(
            (f"malformed schema: expected a JSON object, got {schema.type_name}",),
            message="malformed schema",
        )

    errors = _check_required(schema, data)
    errors.extend(_check_properties(schema, data))

    if errors:
        return ValidationResult.failure(tuple(errors))
    return ValidationResult.success()


def _check_required(schema: JsonObject, data: JsonObject) -> List[str]:
    required = schema.get("required")
    if not isinstance(required, JsonArray):
        return []

    errors = []
    for entry in required:
        # Non-string entries are not field names
        if isinstance(entry, JsonString) and entry.value not in data:
            errors.append(f"missing required field: {entry.value}")
    return errors


def _check_properties(schema: JsonObject, data: JsonObject) -> List[str]:
    properties = schema.get("properties")
    if not isinstance(properties, JsonObject):
        return []

    errors = []
    for name in sorted(data.keys()):
        prop = properties.get(name)
        if not isinstance(prop, JsonObject):
            continue
        error = _check_field(name, data.get(name), prop)
        if error:
            errors.append(error)
    return errors


def _check_field(name: str, value: JsonValue, prop: JsonObject) -> Optional[str]:
    """Check a single payload value against its property definition.

    Returns an error message if invalid, None if valid.
    """
    declared = prop.get("type")
    if not isinstance(declared, JsonString):
        return None
    expected = declared.value

    if expected == "string":
        if not isinstance(value, JsonString):
            return _type_error(name, expected)
        allowed = prop.get("enum")
        if isinstance(allowed, JsonArray):
            members = {item.value for item in allowed if isinstance(item, JsonString)}
            if value.value not in members:
                return f"value '{value.value}' not allowed for field '{name}'"

    elif expected == "number":
        if not isinstance(value, JsonNumber):
            return _type_error(name, expected)
        minimum = prop.get("minimum")
        if isinstance(minimum, JsonNumber) and value.value < minimum.value:
            return f"field '{name}' must be ≥ {_format_number(minimum.value)}"

    elif expected == "boolean":
        if not isinstance(value, JsonBool):
            return _type_error(name, expected)

    elif expected == "object":
        if not isinstance(value, JsonObject):
            return _type_error(name, expected)

    elif expected == "array":
        if not isinstance(value, JsonArray):
            return _type_error(name, expected)

    return None


def _type_error(name: str, expected: str) -> str:
    return f"field '{name}' must be of type {expected}"


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
