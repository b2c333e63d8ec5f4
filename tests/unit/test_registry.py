"""
Unit tests for the schema registry store.

Tests cover:
- Registration and version bumps
- Lookups by name, id and version
- History immutability and atomic delete
- Compatibility handling and statistics
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from mqschema.registry_server.schema import (
    CompatibilityMode,
    InvalidDefinitionError,
    RegisterOptions,
    SchemaKind,
    SchemaNotFoundError,
    SchemaRegistry,
    register_builtin_schemas,
)

ORDER_V1 = {"type": "object", "required": ["order_id"]}
ORDER_V2 = {"type": "object", "required": ["order_id", "amount"]}
ORDER_V3 = {"type": "object", "required": ["order_id", "amount", "status"]}


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return SchemaRegistry(clock=clock)


class TestRegister:
    """Tests for SchemaRegistry.register."""

    def test_first_registration(self, registry):
        """First registration installs version 1 with id 1."""
        schema = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)

        assert schema.id == 1
        assert schema.name == "OrderEvent"
        assert schema.version == 1
        assert schema.kind == SchemaKind.JSON
        assert schema.compatibility == CompatibilityMode.BACKWARD
        assert schema.description == ""
        assert registry.get("OrderEvent") == schema

    def test_accepts_json_text(self, registry):
        """JSON definitions may be given as text or bytes."""
        registry.register("A", SchemaKind.JSON, '{"type": "object"}')
        registry.register("B", SchemaKind.JSON, b'{"type": "object"}')

        assert registry.count() == 2
        assert registry.get("A").definition == '{"type": "object"}'

    def test_versions_are_monotonic(self, registry):
        """Repeated registrations produce versions 1, 2, 3 without gaps."""
        versions = [
            registry.register("OrderEvent", SchemaKind.JSON, d).version
            for d in (ORDER_V1, ORDER_V2, ORDER_V3)
        ]

        assert versions == [1, 2, 3]
        history = registry.get_versions("OrderEvent")
        assert [record.version for record in history] == [1, 2, 3]

    def test_bump_issues_fresh_id(self, registry):
        """Every registration, including a bump, takes a new id."""
        first = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        second = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)

        assert second.id == first.id + 1
        assert registry.get_by_id(second.id) == second
        with pytest.raises(SchemaNotFoundError):
            registry.get_by_id(first.id)

    def test_created_at_kept_across_bumps(self, registry):
        """created_at is the lineage origin; updated_at moves forward."""
        first = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        second = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)

        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at

    def test_bump_without_options_resets_compatibility(self, registry):
        """A bump without options falls back to the default mode."""
        registry.register(
            "OrderEvent",
            SchemaKind.JSON,
            ORDER_V1,
            RegisterOptions(compatibility=CompatibilityMode.FULL, description="orders"),
        )
        bumped = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)

        assert bumped.compatibility == CompatibilityMode.BACKWARD
        assert bumped.description == ""

    def test_set_compatibility_is_discarded_by_bump(self, registry):
        """A mode set via set_compatibility does not survive a bump."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        registry.set_compatibility("OrderEvent", CompatibilityMode.NONE)

        bumped = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)

        assert bumped.compatibility == CompatibilityMode.BACKWARD

    def test_options_override_defaults(self, registry):
        """Options set compatibility and description."""
        schema = registry.register(
            "OrderEvent",
            SchemaKind.JSON,
            ORDER_V1,
            RegisterOptions(description="orders", compatibility=CompatibilityMode.FORWARD),
        )

        assert schema.compatibility == CompatibilityMode.FORWARD
        assert schema.description == "orders"

    def test_configurable_default_compatibility(self):
        """The registry default applies when options give none."""
        registry = SchemaRegistry(default_compatibility=CompatibilityMode.FULL)

        schema = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)

        assert schema.compatibility == CompatibilityMode.FULL

    def test_malformed_json_rejected_without_change(self, registry):
        """Malformed JSON is rejected and leaves the registry untouched."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)

        with pytest.raises(InvalidDefinitionError, match="invalid JSON schema"):
            registry.register("OrderEvent", SchemaKind.JSON, '{"type": ')

        assert registry.get("OrderEvent").version == 1
        assert len(registry.get_versions("OrderEvent")) == 1
        # The failed call must not consume an id
        assert registry.register("Other", SchemaKind.JSON, ORDER_V1).id == 2

    def test_non_object_json_rejected(self, registry):
        """A JSON definition must be an object."""
        with pytest.raises(InvalidDefinitionError, match="expected a JSON object"):
            registry.register("OrderEvent", SchemaKind.JSON, "[1, 2]")

        assert registry.count() == 0

    def test_deeply_nested_definition_rejected(self, registry):
        """Over-deep definitions are invalid, as text or decoded."""
        text = '{"a":' * 5000 + "1" + "}" * 5000
        decoded = {}
        for _ in range(5000):
            decoded = {"a": decoded}

        with pytest.raises(InvalidDefinitionError, match="nested too deeply"):
            registry.register("Deep", SchemaKind.JSON, text)
        with pytest.raises(InvalidDefinitionError, match="nested too deeply"):
            registry.register("Deep", SchemaKind.JSON, decoded)

        assert registry.count() == 0

    def test_non_finite_numbers_rejected(self, registry):
        """NaN and Infinity make a definition invalid."""
        with pytest.raises(InvalidDefinitionError):
            registry.register("X", SchemaKind.JSON, '{"minimum": NaN}')
        with pytest.raises(InvalidDefinitionError):
            registry.register("X", SchemaKind.JSON, {"minimum": float("inf")})

        assert registry.count() == 0

    def test_empty_name_rejected(self, registry):
        """An empty name is an invalid definition."""
        with pytest.raises(InvalidDefinitionError):
            registry.register("", SchemaKind.JSON, ORDER_V1)

    def test_non_json_kinds_store_raw_text(self, registry):
        """Protobuf and Avro definitions are stored as given."""
        proto = 'syntax = "proto3"; message Order { string id = 1; }'
        schema = registry.register("OrderProto", SchemaKind.PROTOBUF, proto)

        assert schema.definition == proto
        assert schema.to_dict()["schema"] == proto


class TestLookups:
    """Tests for get, get_by_id, get_version and get_versions."""

    def test_get_missing(self, registry):
        """Unknown names raise SchemaNotFoundError."""
        with pytest.raises(SchemaNotFoundError, match="schema not found: Nope") as exc_info:
            registry.get("Nope")

        assert exc_info.value.code == "NOT_FOUND"
        assert isinstance(exc_info.value, LookupError)

    def test_get_version_current_and_history(self, registry):
        """get_version finds the current version and archived ones."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)

        assert registry.get_version("OrderEvent", 2).version == 2
        old = registry.get_version("OrderEvent", 1)
        assert old.version == 1
        assert old.to_dict()["schema"] == ORDER_V1

    def test_get_version_missing(self, registry):
        """Unknown versions raise SchemaNotFoundError."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)

        with pytest.raises(SchemaNotFoundError, match="version not found"):
            registry.get_version("OrderEvent", 7)

    def test_get_versions_missing(self, registry):
        """get_versions on an unknown name raises."""
        with pytest.raises(SchemaNotFoundError):
            registry.get_versions("Nope")

    def test_history_is_immutable(self, registry):
        """Archived records never change after later registrations."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)
        archived = registry.get_version("OrderEvent", 1)

        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V3)
        registry.set_compatibility("OrderEvent", CompatibilityMode.NONE)

        again = registry.get_version("OrderEvent", 1)
        assert again == archived
        assert again.definition == archived.definition
        assert again.created_at == archived.created_at

    def test_history_timestamps_are_per_version(self, registry):
        """Each version record carries its own registration time."""
        for definition in (ORDER_V1, ORDER_V2, ORDER_V3):
            registry.register("OrderEvent", SchemaKind.JSON, definition)

        timestamps = [record.created_at for record in registry.get_versions("OrderEvent")]

        assert timestamps == sorted(timestamps)
        assert len(set(timestamps)) == 3

    def test_list_sorted_by_id(self, registry):
        """list() returns current schemas ordered by id."""
        registry.register("B", SchemaKind.JSON, ORDER_V1)
        registry.register("A", SchemaKind.JSON, ORDER_V1)
        registry.register("B", SchemaKind.JSON, ORDER_V2)

        schemas = registry.list()

        assert [(s.name, s.id) for s in schemas] == [("A", 2), ("B", 3)]


class TestDelete:
    """Tests for delete."""

    def test_delete_removes_current_and_history(self, registry):
        """After delete every lookup of the name is NOT_FOUND."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)

        registry.delete("OrderEvent")

        with pytest.raises(SchemaNotFoundError):
            registry.get("OrderEvent")
        with pytest.raises(SchemaNotFoundError):
            registry.get_versions("OrderEvent")
        for version in (1, 2):
            with pytest.raises(SchemaNotFoundError):
                registry.get_version("OrderEvent", version)

    def test_delete_missing(self, registry):
        """Deleting an unknown name raises."""
        with pytest.raises(SchemaNotFoundError):
            registry.delete("Nope")

    def test_ids_not_reused_after_delete(self, registry):
        """The id counter is never rolled back."""
        first = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        registry.delete("OrderEvent")

        again = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)

        assert again.id > first.id
        assert again.version == 1
        assert len(registry.get_versions("OrderEvent")) == 1


class TestCompatibilityAndStats:
    """Tests for set_compatibility, count and get_stats."""

    def test_set_compatibility(self, registry):
        """set_compatibility changes mode and updated_at but not version."""
        before = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)

        after = registry.set_compatibility("OrderEvent", CompatibilityMode.FULL)

        assert after.compatibility == CompatibilityMode.FULL
        assert after.version == before.version
        assert after.id == before.id
        assert after.updated_at > before.updated_at
        assert after.created_at == before.created_at

    def test_set_compatibility_missing(self, registry):
        """Changing compatibility of an unknown name raises."""
        with pytest.raises(SchemaNotFoundError):
            registry.set_compatibility("Nope", CompatibilityMode.FULL)

    def test_stats(self, registry):
        """Stats sum history plus current and group by type."""
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
        registry.register("OrderEvent", SchemaKind.JSON, ORDER_V2)
        registry.register("UserEvent", SchemaKind.JSON, ORDER_V1)
        registry.register("Avro", SchemaKind.AVRO, '{"type": "record"}')

        stats = registry.get_stats()

        assert stats == {
            "total_schemas": 3,
            "total_versions": 4,
            "by_type": {"json": 2, "avro": 1},
        }
        assert registry.count() == 3

    def test_empty_stats(self, registry):
        """An empty registry reports zeros."""
        assert registry.get_stats() == {"total_schemas": 0, "total_versions": 0, "by_type": {}}

    def test_builtin_seed(self, registry):
        """The builtin seed installs four JSON schemas at version 1."""
        installed = register_builtin_schemas(registry)

        assert {s.name for s in installed} == {
            "OrderEvent",
            "NotificationEvent",
            "UserEvent",
            "PaymentEvent",
        }
        assert all(s.version == 1 and s.kind == SchemaKind.JSON for s in installed)
        assert all(s.description for s in installed)


class TestConcurrency:
    """Concurrent access keeps the invariants."""

    def test_concurrent_registrations(self):
        """Parallel bumps of one name yield contiguous versions and unique ids."""
        registry = SchemaRegistry()
        results = []
        results_lock = threading.Lock()

        def worker():
            for _ in range(25):
                schema = registry.register("OrderEvent", SchemaKind.JSON, ORDER_V1)
                with results_lock:
                    results.append(schema)
                registry.get_versions("OrderEvent")
                registry.get_stats()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(s.version for s in results) == list(range(1, 201))
        assert len({s.id for s in results}) == 200
        history = registry.get_versions("OrderEvent")
        assert [r.version for r in history] == list(range(1, 201))
        assert registry.get_stats()["total_versions"] == 200
