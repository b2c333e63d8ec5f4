"""
Core type definitions for the schema registry.

This module defines the value types exchanged with the Registry Store:
- SchemaKind: Document format of a schema (JSON, PROTOBUF, AVRO)
- CompatibilityMode: Declared evolution policy (recorded, not enforced)
- SchemaInfo: Current state of one named schema
- VersionRecord: Immutable snapshot of a superseded version
- ValidationResult: Outcome of validating a payload
- RegisterOptions: Optional overrides for a registration

Invariants:
    - All types are frozen; the store swaps whole values on mutation
    - version >= 1 and grows by exactly one per re-registration
    - created_at is the lineage origin; registered_at is per version
    - ValidationResult.errors is empty iff valid is True

How to change safely:
    - Add new optional fields with defaults
    - Keep to_dict() keys stable; HTTP clients depend on them
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class SchemaKind(Enum):
    """Supported schema document formats.

    Only JSON has a validator; the others are stored but always fail
    validation with an "unsupported" result.
    """

    JSON = "json"
    PROTOBUF = "protobuf"
    AVRO = "avro"

    @classmethod
    def from_str(cls, value: str) -> SchemaKind:
        """Convert a case-insensitive string to SchemaKind.

        Raises:
            ValueError: If value is not a known kind
        """
        normalized = value.strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid schema type '{value}'. Valid types: {valid}")


class CompatibilityMode(Enum):
    """Schema compatibility modes."""

    NONE = "NONE"
    BACKWARD = "BACKWARD"
    FORWARD = "FORWARD"
    FULL = "FULL"

    @classmethod
    def from_str(cls, value: str) -> CompatibilityMode:
        """Convert a case-insensitive string to CompatibilityMode.

        Raises:
            ValueError: If value is not a known mode
        """
        normalized = value.strip().upper()
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = [m.value for m in cls]
        raise ValueError(f"Invalid compatibility mode '{value}'. Valid modes: {valid}")


DEFAULT_COMPATIBILITY = CompatibilityMode.BACKWARD


def _format_timestamp(value: datetime) -> str:
    return value.isoformat()


def render_definition(kind: SchemaKind, definition: str) -> Any:
    """Render a stored definition for output.

    JSON-kind definitions are returned decoded; anything else, or a JSON
    definition that no longer decodes, is returned as raw text.
    """
    if kind is SchemaKind.JSON:
        try:
            return json.loads(definition)
        except json.JSONDecodeError:
            return definition
    return definition


@dataclass(frozen=True)
class RegisterOptions:
    """Optional overrides applied to a single Register call.

    Attributes:
        description: Free-text description ("" when omitted)
        compatibility: Mode for the new version; None means the registry
            default, even when re-registering an existing name
    """

    description: str = ""
    compatibility: Optional[CompatibilityMode] = None


@dataclass(frozen=True)
class VersionRecord:
    """Immutable snapshot of one version of a named schema.

    Attributes:
        version: Version number within the name's lineage
        definition: Schema document text for that version
        created_at: When that version was registered
        kind: Format of the definition (used for rendering only)
    """

    version: int
    definition: str
    created_at: datetime
    kind: SchemaKind = SchemaKind.JSON

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "version": self.version,
            "schema": render_definition(self.kind, self.definition),
            "created_at": _format_timestamp(self.created_at),
        }


@dataclass(frozen=True)
class SchemaInfo:
    """Current state of one named schema.

    Attributes:
        id: Process-unique id; a fresh one is issued on every registration
        name: Unique key of the schema lineage
        version: Current version number (>= 1)
        kind: Document format
        definition: Schema document text
        compatibility: Declared compatibility mode (not enforced)
        description: Free text
        created_at: First registration of this name (never changes)
        updated_at: Last mutation, including compatibility changes
        registered_at: When this version was installed
    """

    id: int
    name: str
    version: int
    kind: SchemaKind
    definition: str
    compatibility: CompatibilityMode
    description: str
    created_at: datetime
    updated_at: datetime
    registered_at: datetime

    def as_version_record(self) -> VersionRecord:
        """Snapshot this schema's current version."""
        return VersionRecord(
            version=self.version,
            definition=self.definition,
            created_at=self.registered_at,
            kind=self.kind,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "type": self.kind.value,
            "schema": render_definition(self.kind, self.definition),
            "compatibility": self.compatibility.value,
            "description": self.description,
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a payload against a schema.

    A failing result is a normal return value, not an error.

    Attributes:
        valid: True when no errors were found
        errors: Error messages in a deterministic order
        message: Human-readable summary
    """

    valid: bool
    errors: Tuple[str, ...] = field(default_factory=tuple)
    message: str = ""

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(valid=True, errors=(), message="validation succeeded")

    @classmethod
    def failure(cls, errors: Tuple[str, ...], message: Optional[str] = None) -> ValidationResult:
        errors = tuple(errors)
        return cls(
            valid=False,
            errors=errors,
            message=message or f"{len(errors)} validation error(s)",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "message": self.message,
        }
