"""
HTTP server implementation for the schema registry.

This module exposes the Registry Store as a small JSON API:
- Schema listing, registration, lookup and deletion
- Version history and per-version lookup
- Compatibility mode changes
- Payload validation and registry statistics

Invariants:
    - Every handler maps onto exactly one SchemaRegistry call
    - Every response is a {success, data|error} JSON envelope
    - Store errors map to status codes: NOT_FOUND -> 404,
      INVALID_DEFINITION -> 400; a failed validation is still a 200

How to change safely:
    - Keep handlers thin; put behavior in the registry
    - Add new routes rather than changing response shapes
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from aiohttp import web
from pydantic import BaseModel
from pydantic import ValidationError as RequestValidationError

from ..config import HttpConfig
from ..schema import RegisterOptions, RegistryError, SchemaRegistry
from ..schema.json_value import JsonDecodeError, from_python
from .models import CompatibilityRequest, RegisterSchemaRequest, ValidateRequest

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "INVALID_DEFINITION": 400,
}


def create_http_app(
    registry: SchemaRegistry,
    config: HttpConfig | None = None,
) -> web.Application:
    """Create an HTTP application for the schema registry.

    Args:
        registry: SchemaRegistry instance served by the app
        config: HTTP server configuration

    Returns:
        aiohttp Application instance
    """
    config = config or HttpConfig()
    app = web.Application()

    app.router.add_get("/health", lambda r: handle_health(r, registry))
    app.router.add_get("/api/schemas", lambda r: handle_list_schemas(r, registry))
    app.router.add_post("/api/schemas", lambda r: handle_register_schema(r, registry))
    app.router.add_get("/api/schemas/by-id/{schema_id}", lambda r: handle_get_by_id(r, registry))
    app.router.add_get("/api/schemas/{name}", lambda r: handle_get_schema(r, registry))
    app.router.add_delete("/api/schemas/{name}", lambda r: handle_delete_schema(r, registry))
    app.router.add_get("/api/schemas/{name}/versions", lambda r: handle_get_versions(r, registry))
    app.router.add_get(
        "/api/schemas/{name}/versions/{version}", lambda r: handle_get_version(r, registry)
    )
    app.router.add_put(
        "/api/schemas/{name}/compatibility", lambda r: handle_set_compatibility(r, registry)
    )
    app.router.add_post("/api/validate", lambda r: handle_validate(r, registry))
    app.router.add_get("/api/stats", lambda r: handle_stats(r, registry))

    @web.middleware
    async def cors_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
        if request.method == "OPTIONS":
            response = web.Response()
        else:
            response = await handler(request)

        origin = request.headers.get("Origin", "*")
        if "*" in config.cors_origins or origin in config.cors_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @web.middleware
    async def error_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
        try:
            return await handler(request)
        except RegistryError as e:
            return error_response(e.message, status=_STATUS_BY_CODE.get(e.code, 400))
        except web.HTTPException as e:
            # Routing failures (404 unknown path, 405 wrong method) get the envelope too
            response = error_response(e.reason, status=e.status)
            allow = e.headers.get("Allow")
            if allow:
                response.headers["Allow"] = allow
            return response
        except Exception as e:
            logger.error(f"HTTP handler error: {e}", exc_info=True)
            return error_response(str(e), status=500)

    # cors is outermost so error envelopes carry CORS headers too
    app.middlewares.append(cors_middleware)
    app.middlewares.append(error_middleware)

    return app


def success_response(data: Any, status: int = 200) -> web.Response:
    return web.json_response({"success": True, "data": data}, status=status)


def error_response(message: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


async def parse_body(request: web.Request, model: type[BaseModel]) -> Any:
    """Parse and validate a JSON request body.

    Raises:
        web.HTTPBadRequest: If the body is not JSON or fails validation
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        raise web.HTTPBadRequest(reason="Invalid JSON body")

    try:
        return model.model_validate(body)
    except RequestValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "body"
        raise web.HTTPBadRequest(reason=f"{location}: {first['msg']}")


def _int_param(request: web.Request, key: str) -> int:
    raw = request.match_info[key]
    try:
        return int(raw)
    except ValueError:
        raise web.HTTPBadRequest(reason=f"{key} must be an integer, got '{raw}'")


async def handle_health(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /health - Liveness check."""
    return success_response({"healthy": True, "schemas": registry.count()})


async def handle_list_schemas(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /api/schemas - List current schemas."""
    return success_response([schema.to_dict() for schema in registry.list()])


async def handle_register_schema(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle POST /api/schemas - Register a schema or a new version."""
    body = await parse_body(request, RegisterSchemaRequest)

    schema = registry.register(
        body.name,
        body.kind,
        body.definition,
        RegisterOptions(description=body.description, compatibility=body.compatibility_mode),
    )
    return success_response(schema.to_dict(), status=201)


async def handle_get_schema(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /api/schemas/{name} - Get current version."""
    schema = registry.get(request.match_info["name"])
    return success_response(schema.to_dict())


async def handle_get_by_id(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /api/schemas/by-id/{schema_id} - Get current schema by id."""
    schema = registry.get_by_id(_int_param(request, "schema_id"))
    return success_response(schema.to_dict())


async def handle_delete_schema(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle DELETE /api/schemas/{name} - Delete a schema and its history."""
    name = request.match_info["name"]
    registry.delete(name)
    return success_response({"deleted": name})


async def handle_get_versions(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /api/schemas/{name}/versions - Version history."""
    versions = registry.get_versions(request.match_info["name"])
    return success_response([record.to_dict() for record in versions])


async def handle_get_version(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /api/schemas/{name}/versions/{version} - One version."""
    record = registry.get_version(request.match_info["name"], _int_param(request, "version"))
    return success_response(record.to_dict())


async def handle_set_compatibility(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle PUT /api/schemas/{name}/compatibility - Change compatibility mode."""
    body = await parse_body(request, CompatibilityRequest)
    schema = registry.set_compatibility(request.match_info["name"], body.mode)
    return success_response(schema.to_dict())


async def handle_validate(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle POST /api/validate - Validate a payload.

    A failing validation is still a successful request.
    """
    body = await parse_body(request, ValidateRequest)
    try:
        payload = from_python(body.data)
    except JsonDecodeError as e:
        raise web.HTTPBadRequest(reason=f"data: {e}")

    result = registry.validate(body.schema_name, payload)
    return success_response(result.to_dict())


async def handle_stats(request: web.Request, registry: SchemaRegistry) -> web.Response:
    """Handle GET /api/stats - Registry statistics."""
    return success_response(registry.get_stats())
