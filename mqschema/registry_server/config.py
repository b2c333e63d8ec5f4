"""
Configuration management for the schema registry server.

All configuration is done via environment variables - no config files.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for local development
    - Invalid values fail fast with ValueError at startup

How to change safely:
    - Add new settings with defaults that keep existing deployments working
    - Document every new variable in the class docstring
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from .schema.types import DEFAULT_COMPATIBILITY, CompatibilityMode

logger = logging.getLogger(__name__)

_LOG_FORMATS = ("json", "text")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class HttpConfig:
    """HTTP API configuration.

    Attributes:
        host: Address to bind
        port: Port to listen on
        cors_origins: Allowed CORS origins ("*" allows any)
    """

    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> HttpConfig:
        """Load configuration from environment variables."""
        origins = os.getenv("SCHEMA_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("SCHEMA_HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("SCHEMA_HTTP_PORT", "8080")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


@dataclass(frozen=True)
class RegistryConfig:
    """Registry store configuration.

    Attributes:
        default_compatibility: Mode applied when a registration gives none
        seed_builtin: Whether to register the bootstrap schemas on start
    """

    default_compatibility: CompatibilityMode = DEFAULT_COMPATIBILITY
    seed_builtin: bool = True

    @classmethod
    def from_env(cls) -> RegistryConfig:
        """Load configuration from environment variables."""
        return cls(
            default_compatibility=CompatibilityMode.from_str(
                os.getenv("REGISTRY_DEFAULT_COMPATIBILITY", DEFAULT_COMPATIBILITY.value)
            ),
            seed_builtin=_env_bool("REGISTRY_SEED_BUILTIN", "true"),
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json").lower(),
        )


@dataclass
class ServerConfig:
    """Complete server configuration.

    Attributes:
        http: HTTP API configuration
        registry: Registry store configuration
        observability: Logging configuration
    """

    http: HttpConfig = field(default_factory=HttpConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Load complete configuration from environment variables.

        Returns:
            ServerConfig with all sections populated from environment.

        Raises:
            ValueError: If a value is missing or invalid.
        """
        config = cls(
            http=HttpConfig.from_env(),
            registry=RegistryConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not 0 < self.http.port < 65536:
            raise ValueError(f"SCHEMA_HTTP_PORT must be between 1 and 65535, got {self.http.port}")
        if not self.http.cors_origins:
            raise ValueError("SCHEMA_CORS_ORIGINS must list at least one origin")
        if self.observability.log_format not in _LOG_FORMATS:
            raise ValueError(
                f"Invalid LOG_FORMAT '{self.observability.log_format}'. "
                f"Must be one of: {', '.join(_LOG_FORMATS)}"
            )
        if not isinstance(logging.getLevelName(self.observability.log_level.upper()), int):
            raise ValueError(f"Invalid LOG_LEVEL '{self.observability.log_level}'")

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Server configuration loaded",
            extra={
                "http_host": self.http.host,
                "http_port": self.http.port,
                "cors_origins": list(self.http.cors_origins),
                "default_compatibility": self.registry.default_compatibility.value,
                "seed_builtin": self.registry.seed_builtin,
                "log_level": self.observability.log_level,
            },
        )
