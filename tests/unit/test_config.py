"""
Unit tests for environment configuration and server bootstrap helpers.
"""

import logging

import json_log_formatter
import pytest

from mqschema.registry_server.config import (
    HttpConfig,
    ObservabilityConfig,
    RegistryConfig,
    ServerConfig,
)
from mqschema.registry_server.main import build_registry, setup_logging
from mqschema.registry_server.schema import CompatibilityMode

ENV_VARS = (
    "SCHEMA_HTTP_HOST",
    "SCHEMA_HTTP_PORT",
    "SCHEMA_CORS_ORIGINS",
    "REGISTRY_DEFAULT_COMPATIBILITY",
    "REGISTRY_SEED_BUILTIN",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestServerConfig:
    """Tests for ServerConfig.from_env and validate."""

    def test_defaults(self):
        """Without environment variables the defaults apply."""
        config = ServerConfig.from_env()

        assert config.http == HttpConfig()
        assert config.http.port == 8080
        assert config.http.cors_origins == ("*",)
        assert config.registry.default_compatibility == CompatibilityMode.BACKWARD
        assert config.registry.seed_builtin is True
        assert config.observability.log_level == "INFO"
        assert config.observability.log_format == "json"

    def test_from_env(self, monkeypatch):
        """Every variable is read."""
        monkeypatch.setenv("SCHEMA_HTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("SCHEMA_HTTP_PORT", "9090")
        monkeypatch.setenv("SCHEMA_CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("REGISTRY_DEFAULT_COMPATIBILITY", "full")
        monkeypatch.setenv("REGISTRY_SEED_BUILTIN", "false")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "TEXT")

        config = ServerConfig.from_env()

        assert config.http.host == "127.0.0.1"
        assert config.http.port == 9090
        assert config.http.cors_origins == ("http://a.test", "http://b.test")
        assert config.registry.default_compatibility == CompatibilityMode.FULL
        assert config.registry.seed_builtin is False
        assert config.observability.log_level == "debug"
        assert config.observability.log_format == "text"

    def test_invalid_port(self, monkeypatch):
        """Out-of-range ports fail fast."""
        monkeypatch.setenv("SCHEMA_HTTP_PORT", "70000")

        with pytest.raises(ValueError, match="SCHEMA_HTTP_PORT"):
            ServerConfig.from_env()

    def test_invalid_compatibility(self, monkeypatch):
        """Unknown compatibility modes fail fast."""
        monkeypatch.setenv("REGISTRY_DEFAULT_COMPATIBILITY", "SIDEWAYS")

        with pytest.raises(ValueError, match="Invalid compatibility mode"):
            ServerConfig.from_env()

    def test_invalid_log_format(self, monkeypatch):
        """Only json and text formats are accepted."""
        monkeypatch.setenv("LOG_FORMAT", "xml")

        with pytest.raises(ValueError, match="LOG_FORMAT"):
            ServerConfig.from_env()

    def test_invalid_log_level(self, monkeypatch):
        """Unknown log levels are rejected."""
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")

        with pytest.raises(ValueError, match="LOG_LEVEL"):
            ServerConfig.from_env()

    def test_empty_origins(self):
        """At least one CORS origin is required."""
        config = ServerConfig(http=HttpConfig(cors_origins=()))

        with pytest.raises(ValueError, match="SCHEMA_CORS_ORIGINS"):
            config.validate()


class TestBootstrap:
    """Tests for setup_logging and build_registry."""

    def test_build_registry_seeds(self):
        """The builtin schemas are seeded by default."""
        registry = build_registry(ServerConfig())

        assert registry.count() == 4
        assert registry.get("OrderEvent").version == 1

    def test_build_registry_without_seed(self):
        """Seeding can be disabled and the default mode changed."""
        config = ServerConfig(
            registry=RegistryConfig(
                default_compatibility=CompatibilityMode.NONE,
                seed_builtin=False,
            )
        )

        registry = build_registry(config)

        assert registry.count() == 0
        assert registry.default_compatibility == CompatibilityMode.NONE

    def test_setup_logging_json(self):
        """The json format installs the JSON formatter."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(ServerConfig(observability=ObservabilityConfig(log_level="DEBUG")))

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_setup_logging_text(self):
        """The text format installs a plain formatter."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(ServerConfig(observability=ObservabilityConfig(log_format="text")))

            assert root.level == logging.INFO
            assert not isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
