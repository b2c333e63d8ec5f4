"""
Schema module for the registry server.

This module provides the versioned schema store and its validation engine:
- Type definitions (SchemaInfo, VersionRecord, ValidationResult)
- SchemaRegistry for versioned storage and lookup
- Validation engine for JSON-kind schemas
- Bootstrap schemas seeded at startup

Invariants:
    - Versions per name start at 1 and bump by exactly one
    - Ids are never reused for the lifetime of a registry
    - Compatibility mode is recorded but not enforced

How to change safely:
    - Add keywords to validation.py without touching the store
    - Keep the registry free of module-level state; pass instances around
"""

from .builtin import BUILTIN_SCHEMAS, register_builtin_schemas
from .errors import InvalidDefinitionError, RegistryError, SchemaNotFoundError
from .json_value import JsonDecodeError, JsonValue, from_python, parse_json, to_json_value
from .locking import ReadWriteLock
from .registry import SchemaRegistry
from .types import (
    DEFAULT_COMPATIBILITY,
    CompatibilityMode,
    RegisterOptions,
    SchemaInfo,
    SchemaKind,
    ValidationResult,
    VersionRecord,
)
from .validation import validate_for_kind, validate_json

__all__ = [
    # Types
    "SchemaKind",
    "CompatibilityMode",
    "DEFAULT_COMPATIBILITY",
    "RegisterOptions",
    "SchemaInfo",
    "VersionRecord",
    "ValidationResult",
    # JSON values
    "JsonValue",
    "JsonDecodeError",
    "from_python",
    "parse_json",
    "to_json_value",
    # Registry
    "SchemaRegistry",
    "ReadWriteLock",
    "BUILTIN_SCHEMAS",
    "register_builtin_schemas",
    # Errors
    "RegistryError",
    "SchemaNotFoundError",
    "InvalidDefinitionError",
    # Validation
    "validate_for_kind",
    "validate_json",
]
