"""
Schema registry server - Main entry point.

This module starts the registry with its HTTP API:
- Builds the SchemaRegistry and seeds the builtin schemas
- Serves the aiohttp application until a shutdown signal

Usage:
    python -m mqschema.registry_server.main

Configuration is entirely via environment variables.
See config.py for all available settings.

Invariants:
    - The registry is created in start() and dropped in stop(); there is
      no module-level instance
    - State is in-memory only and rebuilt from the seed on every start

How to change safely:
    - Pass the registry explicitly to every new consumer
    - Test shutdown sequence when adding components
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

import json_log_formatter
from aiohttp import web

from .api import create_http_app
from .config import ServerConfig
from .schema import SchemaRegistry, register_builtin_schemas

logger = logging.getLogger(__name__)


def setup_logging(config: ServerConfig) -> None:
    """Configure logging based on configuration.

    Args:
        config: Server configuration
    """
    level = getattr(logging, config.observability.log_level.upper(), logging.INFO)

    if config.observability.log_format == "json":
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def build_registry(config: ServerConfig) -> SchemaRegistry:
    """Create a registry from configuration, seeding it if enabled."""
    registry = SchemaRegistry(default_compatibility=config.registry.default_compatibility)
    if config.registry.seed_builtin:
        register_builtin_schemas(registry)
    return registry


class RegistryServer:
    """Schema registry server orchestrator.

    Owns the registry for the lifetime of the process and serves it over
    HTTP.

    Attributes:
        config: Server configuration
        registry: The live SchemaRegistry (None until started)

    Example:
        >>> server = RegistryServer()
        >>> await server.start()
        >>> # Server is running
        >>> await server.stop()
    """

    def __init__(self, config: ServerConfig | None = None) -> None:
        """Initialize the server.

        Args:
            config: Optional server configuration (loaded from env if not provided)
        """
        self.config = config or ServerConfig.from_env()
        self.registry: SchemaRegistry | None = None
        self._runner: web.AppRunner | None = None
        self._running = False
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """Start serving and block until shutdown is requested."""
        if self._running:
            logger.warning("Server already running")
            return

        logger.info("Starting schema registry server")
        self.config.log_config()

        try:
            self.registry = build_registry(self.config)

            app = create_http_app(self.registry, self.config.http)
            self._runner = web.AppRunner(app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.config.http.host, self.config.http.port)
            await site.start()

            self._running = True
            logger.info(
                f"Schema registry listening on http://{self.config.http.host}:"
                f"{self.config.http.port} with {self.registry.count()} schemas"
            )

            await self._shutdown_event.wait()

        except Exception as e:
            logger.error(f"Server startup failed: {e}", exc_info=True)
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the server and release the registry."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        if self._running:
            logger.info("Schema registry server stopped")
        self._running = False
        self.registry = None

    def request_shutdown(self) -> None:
        """Request graceful shutdown."""
        self._shutdown_event.set()


def main() -> None:
    """Main entry point."""
    try:
        config = ServerConfig.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    server = RegistryServer(config)

    def handle_signal(sig: int) -> None:
        logger.info(f"Received signal {sig}, initiating shutdown")
        server.request_shutdown()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        pass
    finally:
        loop.run_until_complete(server.stop())
        loop.close()


if __name__ == "__main__":
    main()
