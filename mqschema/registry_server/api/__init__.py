"""
API layer for the schema registry.

Exposes the registry over HTTP (aiohttp) with JSON envelopes.
"""

from .http_server import create_http_app

__all__ = [
    "create_http_app",
]
