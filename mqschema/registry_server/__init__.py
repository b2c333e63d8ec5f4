"""
MQ Schema Registry - in-process versioned schema registry for message payloads.

This package implements the schema side of a message-broker toolkit:
- A versioned store of named schema documents (JSON, Protobuf, Avro)
- A validation engine that checks payloads against JSON-kind schemas
- An HTTP API and an interactive shell layered on top of the store

Architecture:
    ┌─────────────┐     ┌─────────────┐
    │ HTTP client │────▶│  aiohttp    │─────┐
    └─────────────┘     │  API        │     │
                        └─────────────┘     ▼
    ┌─────────────┐     ┌─────────────┐   ┌──────────────────┐   ┌────────────┐
    │  Terminal   │────▶│ SchemaShell │──▶│  SchemaRegistry  │──▶│ Validation │
    └─────────────┘     └─────────────┘   │  (RW-locked)     │   │  Engine    │
                                          └──────────────────┘   └────────────┘

Invariants:
    - Exactly one current schema per name; history holds superseded versions
    - Versions bump by exactly one on every re-registration
    - Schema ids come from a monotonic counter and are never reused
    - State lives in memory only and is rebuilt from the seed on start

How to change safely:
    - Keep the store free of validation rules; put them in schema/validation.py
    - Keep the HTTP and shell layers thin: one store call per command
    - Never introduce a module-level registry; pass the store explicitly
"""

from ._version import __version__

__all__ = ["__version__"]
