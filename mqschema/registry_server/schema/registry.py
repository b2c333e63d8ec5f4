"""
Schema Registry store.

The SchemaRegistry owns every named schema and its version history.
It provides:
- Registration with automatic version bump on re-registration
- Lookup by name, by id, and by (name, version)
- History listing, deletion, and aggregate statistics
- Payload validation against the current version of a schema

Invariants:
    - Exactly one current SchemaInfo per name
    - History for a name only holds versions lower than the current one
    - Ids come from a monotonic counter; deletion never rolls it back
    - Every public operation is atomic; no partial registration is visible

How to change safely:
    - Keep validation rules in validation.py; the store only dispatches
    - Mutate state only inside write_locked() and only after all checks pass
    - Replace SchemaInfo values with dataclasses.replace(), never edit them

Example:
    >>> registry = SchemaRegistry()
    >>> _ = registry.register("OrderEvent", SchemaKind.JSON, '{"type": "object"}')
    >>> registry.get("OrderEvent").version
    1
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .errors import InvalidDefinitionError, SchemaNotFoundError
from .json_value import JsonDecodeError, JsonObject, JsonValue, from_python, parse_json
from .locking import ReadWriteLock
from .types import (
    DEFAULT_COMPATIBILITY,
    CompatibilityMode,
    RegisterOptions,
    SchemaInfo,
    SchemaKind,
    ValidationResult,
    VersionRecord,
)
from .validation import validate_for_kind

logger = logging.getLogger(__name__)

Definition = Union[str, bytes, bytearray, Mapping[str, Any], JsonValue]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SchemaRegistry:
    """In-memory store of versioned schemas.

    The registry keeps two maps guarded as one unit by a readers-writer
    lock: the current schema per name, and the superseded versions per
    name (oldest first).

    Thread-safety:
        - Reads (get, list, stats, validate lookup) run concurrently
        - Mutations (register, delete, set_compatibility) are exclusive
        - Validation itself runs outside the lock on an immutable snapshot

    Attributes:
        default_compatibility: Mode applied when a registration gives none

    Example:
        >>> registry = SchemaRegistry()
        >>> _ = registry.register("UserEvent", SchemaKind.JSON, {"required": ["user_id"]})
        >>> registry.validate("UserEvent", {"user_id": "U-1"}).valid
        True
    """

    def __init__(
        self,
        default_compatibility: CompatibilityMode = DEFAULT_COMPATIBILITY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            default_compatibility: Mode used when options give none
            clock: Returns the current UTC time (injectable for tests)
        """
        self.default_compatibility = default_compatibility
        self._clock = clock or _utcnow
        self._schemas: Dict[str, SchemaInfo] = {}
        self._versions: Dict[str, List[VersionRecord]] = {}
        self._next_id = 1
        self._lock = ReadWriteLock()

    def register(
        self,
        name: str,
        kind: SchemaKind,
        definition: Definition,
        options: Optional[RegisterOptions] = None,
    ) -> SchemaInfo:
        """Register a schema, bumping the version if the name exists.

        Re-registering a name archives the current version into history.
        Compatibility and description are taken from options or defaults
        on every call; they are not carried over from the previous version.
        A fresh id is issued on every call, including version bumps.

        Args:
            name: Schema name
            kind: Document format
            definition: Schema document (JSON text, bytes, or decoded mapping)
            options: Optional description / compatibility overrides

        Returns:
            The newly installed SchemaInfo

        Raises:
            InvalidDefinitionError: If name is empty or a JSON definition
                is malformed; the registry is left unchanged
        """
        if not name:
            raise InvalidDefinitionError("schema name is required", name=name)
        text = _normalize_definition(name, kind, definition)

        options = options or RegisterOptions()
        compatibility = options.compatibility or self.default_compatibility

        with self._lock.write_locked():
            now = self._clock()
            existing = self._schemas.get(name)
            if existing is not None:
                version = existing.version + 1
                created_at = existing.created_at
                self._versions.setdefault(name, []).append(existing.as_version_record())
            else:
                version = 1
                created_at = now

            schema = SchemaInfo(
                id=self._next_id,
                name=name,
                version=version,
                kind=kind,
                definition=text,
                compatibility=compatibility,
                description=options.description,
                created_at=created_at,
                updated_at=now,
                registered_at=now,
            )
            self._schemas[name] = schema
            self._next_id += 1

        logger.info(
            f"Registered schema: {name} v{version} (id={schema.id}, type={kind.value}, "
            f"compatibility={compatibility.value})"
        )
        return schema

    def get(self, name: str) -> SchemaInfo:
        """Get the current version of a schema.

        Raises:
            SchemaNotFoundError: If no schema is registered under name
        """
        with self._lock.read_locked():
            schema = self._schemas.get(name)
        if schema is None:
            raise SchemaNotFoundError(f"schema not found: {name}", name=name)
        return schema

    def get_by_id(self, schema_id: int) -> SchemaInfo:
        """Get a current schema by id.

        Only current versions are searched; ids of superseded versions
        are no longer reachable.

        Raises:
            SchemaNotFoundError: If no current schema carries the id
        """
        with self._lock.read_locked():
            for schema in self._schemas.values():
                if schema.id == schema_id:
                    return schema
        raise SchemaNotFoundError(f"schema id not found: {schema_id}", schema_id=schema_id)

    def get_version(self, name: str, version: int) -> VersionRecord:
        """Get one version of a schema, current or historical.

        Raises:
            SchemaNotFoundError: If the name or the version does not exist
        """
        with self._lock.read_locked():
            current = self._schemas.get(name)
            if current is None:
                raise SchemaNotFoundError(f"schema not found: {name}", name=name)
            if current.version == version:
                return current.as_version_record()
            for record in self._versions.get(name, ()):
                if record.version == version:
                    return record
        raise SchemaNotFoundError(
            f"version not found: {name} v{version}", name=name, version=version
        )

    def get_versions(self, name: str) -> List[VersionRecord]:
        """List every version of a schema, oldest first, current last.

        Raises:
            SchemaNotFoundError: If no schema is registered under name
        """
        with self._lock.read_locked():
            current = self._schemas.get(name)
            if current is None:
                raise SchemaNotFoundError(f"schema not found: {name}", name=name)
            history = list(self._versions.get(name, ()))
        history.append(current.as_version_record())
        return history

    def list(self) -> List[SchemaInfo]:
        """List current schemas sorted by id."""
        with self._lock.read_locked():
            schemas = list(self._schemas.values())
        return sorted(schemas, key=lambda s: s.id)

    def delete(self, name: str) -> None:
        """Delete a schema and its whole version history.

        Raises:
            SchemaNotFoundError: If no schema is registered under name
        """
        with self._lock.write_locked():
            if name not in self._schemas:
                raise SchemaNotFoundError(f"schema not found: {name}", name=name)
            del self._schemas[name]
            self._versions.pop(name, None)
        logger.info(f"Deleted schema: {name}")

    def set_compatibility(self, name: str, mode: CompatibilityMode) -> SchemaInfo:
        """Change the compatibility mode of the current version.

        The version is unchanged; updated_at is refreshed.

        Raises:
            SchemaNotFoundError: If no schema is registered under name
        """
        with self._lock.write_locked():
            schema = self._schemas.get(name)
            if schema is None:
                raise SchemaNotFoundError(f"schema not found: {name}", name=name)
            schema = dataclasses.replace(schema, compatibility=mode, updated_at=self._clock())
            self._schemas[name] = schema
        logger.info(f"Compatibility for {name} set to {mode.value}")
        return schema

    def count(self) -> int:
        """Number of distinct schema names."""
        with self._lock.read_locked():
            return len(self._schemas)

    def get_stats(self) -> Dict[str, Any]:
        """Aggregate statistics.

        Returns:
            Dictionary with total_schemas, total_versions (history plus
            current, summed over names) and by_type (kind value -> count)
        """
        with self._lock.read_locked():
            by_type = Counter(schema.kind.value for schema in self._schemas.values())
            total_versions = sum(
                len(self._versions.get(name, ())) + 1 for name in self._schemas
            )
            total_schemas = len(self._schemas)
        return {
            "total_schemas": total_schemas,
            "total_versions": total_versions,
            "by_type": dict(by_type),
        }

    def validate(self, name: str, payload: Any) -> ValidationResult:
        """Validate a payload against the current version of a schema.

        Never raises for an unknown name or unsupported kind; both yield a
        failing ValidationResult.

        Args:
            name: Schema name
            payload: JSON text, bytes, JsonValue, or decoded Python value

        Returns:
            ValidationResult
        """
        try:
            schema = self.get(name)
        except SchemaNotFoundError as e:
            return ValidationResult.failure((e.message,), message="schema lookup failed")

        result = validate_for_kind(schema.kind, schema.definition, payload)
        logger.debug(f"Validated payload against {name} v{schema.version}: {result.message}")
        return result


def _normalize_definition(name: str, kind: SchemaKind, definition: Definition) -> str:
    """Turn a definition into stored text, checking JSON-kind documents.

    Text is stored as given. Decoded documents are serialized with sorted
    keys.

    Raises:
        InvalidDefinitionError: If a JSON definition is malformed
    """
    if isinstance(definition, (bytes, bytearray)):
        try:
            definition = bytes(definition).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDefinitionError(f"invalid schema for '{name}': {e}", name=name) from e

    if isinstance(definition, str):
        if kind is not SchemaKind.JSON:
            return definition
        try:
            parsed = parse_json(definition)
        except JsonDecodeError as e:
            raise InvalidDefinitionError(f"invalid JSON schema for '{name}': {e}", name=name) from e
        text = definition
    else:
        try:
            parsed = from_python(definition)
            text = json.dumps(parsed.to_python(), sort_keys=True, allow_nan=False)
        except JsonDecodeError as e:
            raise InvalidDefinitionError(f"invalid schema for '{name}': {e}", name=name) from e
        except RecursionError:
            raise InvalidDefinitionError(
                f"invalid schema for '{name}': document nested too deeply", name=name
            ) from None

    if kind is SchemaKind.JSON and not isinstance(parsed, JsonObject):
        raise InvalidDefinitionError(
            f"invalid JSON schema for '{name}': expected a JSON object", name=name
        )
    return text
