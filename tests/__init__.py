"""
Schema Registry Test Suite.

This package contains:
- unit/: Unit tests (store, validation engine, lock, config, shell)
- integration/: Integration tests (HTTP API over aiohttp's test server)
"""
