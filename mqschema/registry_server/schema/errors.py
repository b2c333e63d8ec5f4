"""
Error types for the schema registry.

This module defines the exceptions raised by the Registry Store:
- RegistryError: Base exception
- SchemaNotFoundError: Name, id or version absent
- InvalidDefinitionError: Malformed schema document at registration time

A failed validation is NOT an error: SchemaRegistry.validate returns a
ValidationResult with valid=False instead of raising.

Invariants:
    - All store errors inherit from RegistryError
    - Every error carries a stable code for programmatic handling
    - Errors are raised before any state mutation
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RegistryError(Exception):
    """Base exception for all registry errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "REGISTRY_ERROR"
        self.details = details or {}


class SchemaNotFoundError(RegistryError, LookupError):
    """Requested schema, id or version does not exist.

    Raised when:
    - No current schema is registered under the name
    - No current schema carries the id
    - The name exists but the version was never issued
    """

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        schema_id: Optional[int] = None,
        version: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            code="NOT_FOUND",
            details={"name": name, "id": schema_id, "version": version},
        )
        self.name = name
        self.schema_id = schema_id
        self.version = version


class InvalidDefinitionError(RegistryError, ValueError):
    """Schema definition could not be accepted.

    Raised when:
    - A JSON-kind definition does not parse
    - A JSON-kind definition is not a JSON object
    - The schema name is empty
    """

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="INVALID_DEFINITION",
            details={"name": name},
        )
        self.name = name
