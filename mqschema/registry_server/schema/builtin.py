"""
Bootstrap schemas registered at startup.

Four JSON-kind event schemas cover the message flows of the broker demo
services: order lifecycle, notifications, user actions and payments.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from .registry import SchemaRegistry
from .types import RegisterOptions, SchemaInfo, SchemaKind

logger = logging.getLogger(__name__)

_DRAFT_07 = "http://json-schema.org/draft-07/schema#"

ORDER_EVENT_SCHEMA: Dict[str, Any] = {
    "$schema": _DRAFT_07,
    "type": "object",
    "required": ["order_id", "customer_id", "amount", "status", "created_at"],
    "properties": {
        "order_id": {"type": "string"},
        "customer_id": {"type": "string"},
        "amount": {"type": "number", "minimum": 0},
        "status": {
            "type": "string",
            "enum": ["created", "paid", "shipped", "delivered", "cancelled"],
        },
        "created_at": {"type": "string", "format": "date-time"},
    },
}

NOTIFICATION_EVENT_SCHEMA: Dict[str, Any] = {
    "$schema": _DRAFT_07,
    "type": "object",
    "required": ["type", "recipient", "subject", "body"],
    "properties": {
        "type": {"type": "string", "enum": ["email", "sms", "push"]},
        "recipient": {"type": "string"},
        "subject": {"type": "string"},
        "body": {"type": "string"},
        "metadata": {"type": "object"},
        "created_at": {"type": "string", "format": "date-time"},
    },
}

USER_EVENT_SCHEMA: Dict[str, Any] = {
    "$schema": _DRAFT_07,
    "type": "object",
    "required": ["user_id", "action", "timestamp"],
    "properties": {
        "user_id": {"type": "string"},
        "action": {"type": "string", "enum": ["login", "logout", "signup", "delete"]},
        "ip_address": {"type": "string"},
        "user_agent": {"type": "string"},
        "timestamp": {"type": "string", "format": "date-time"},
    },
}

PAYMENT_EVENT_SCHEMA: Dict[str, Any] = {
    "$schema": _DRAFT_07,
    "type": "object",
    "required": ["payment_id", "order_id", "amount", "currency", "status"],
    "properties": {
        "payment_id": {"type": "string"},
        "order_id": {"type": "string"},
        "amount": {"type": "number", "minimum": 0},
        "currency": {"type": "string", "enum": ["KRW", "USD", "EUR", "JPY"]},
        "status": {"type": "string", "enum": ["pending", "completed", "failed", "refunded"]},
        "method": {"type": "string", "enum": ["card", "bank", "virtual", "point"]},
        "created_at": {"type": "string", "format": "date-time"},
    },
}

# (name, definition, description)
BUILTIN_SCHEMAS: List[Tuple[str, Dict[str, Any], str]] = [
    ("OrderEvent", ORDER_EVENT_SCHEMA, "Order lifecycle events: created, paid, shipped"),
    ("NotificationEvent", NOTIFICATION_EVENT_SCHEMA, "Email, SMS and push notification events"),
    ("UserEvent", USER_EVENT_SCHEMA, "User login, logout and signup events"),
    ("PaymentEvent", PAYMENT_EVENT_SCHEMA, "Payment processing and refund events"),
]


def register_builtin_schemas(registry: SchemaRegistry) -> List[SchemaInfo]:
    """Register the bootstrap schemas into a registry.

    Args:
        registry: Target registry

    Returns:
        The installed schemas, in registration order
    """
    installed = [
        registry.register(name, SchemaKind.JSON, definition, RegisterOptions(description=description))
        for name, definition, description in BUILTIN_SCHEMAS
    ]
    logger.info(f"Seeded {len(installed)} builtin schemas")
    return installed
