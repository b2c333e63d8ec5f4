"""
Request models for the schema registry HTTP API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..schema.types import CompatibilityMode, SchemaKind


class RegisterSchemaRequest(BaseModel):
    """Request to register a schema (or a new version of one)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Schema name")
    type: str = Field("json", description="Schema type: json, protobuf or avro")
    definition: Any = Field(..., alias="schema", description="Schema document")
    description: str = Field("", description="Free-text description")
    compatibility: str | None = Field(None, description="NONE, BACKWARD, FORWARD or FULL")

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        SchemaKind.from_str(value or "json")
        return value or "json"

    @field_validator("compatibility")
    @classmethod
    def _check_compatibility(cls, value: str | None) -> str | None:
        if value:
            CompatibilityMode.from_str(value)
        return value or None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.from_str(self.type)

    @property
    def compatibility_mode(self) -> CompatibilityMode | None:
        return CompatibilityMode.from_str(self.compatibility) if self.compatibility else None


class ValidateRequest(BaseModel):
    """Request to validate a payload against a named schema."""

    schema_name: str = Field(..., min_length=1, description="Schema name")
    data: Any = Field(..., description="Payload to validate")


class CompatibilityRequest(BaseModel):
    """Request to change a schema's compatibility mode."""

    compatibility: str = Field(..., description="NONE, BACKWARD, FORWARD or FULL")

    @field_validator("compatibility")
    @classmethod
    def _check_compatibility(cls, value: str) -> str:
        CompatibilityMode.from_str(value)
        return value

    @property
    def mode(self) -> CompatibilityMode:
        return CompatibilityMode.from_str(self.compatibility)
