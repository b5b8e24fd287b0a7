"""Shared helpers for schema shape inspection."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from .model_types import SchemaKind
from .spec_graph import SchemaNode


class SchemaShape(Enum):
    """Closed set of shapes a schema node can take when mapped to a type."""

    REFERENCE = "reference"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    TYPED_MAP = "typed_map"
    OPEN_MAP = "open_map"
    OBJECT = "object"
    UNKNOWN = "unknown"


def schema_shape(schema: SchemaNode) -> SchemaShape:
    """Return the shape used for type mapping.

    Args:
        schema (SchemaNode): Schema node to inspect.

    Returns:
        SchemaShape: The first matching shape, checked in declaration order.
    """
    if schema.is_reference:
        return SchemaShape.REFERENCE
    if schema.has_type("string"):
        return SchemaShape.STRING
    if schema.has_type("integer"):
        return SchemaShape.INTEGER
    if schema.has_type("number"):
        return SchemaShape.NUMBER
    if schema.has_type("boolean"):
        return SchemaShape.BOOLEAN
    if schema.has_type("array") or schema.item_schema is not None:
        return SchemaShape.ARRAY
    if not schema.types or schema.has_type("object"):
        if schema.value_schema is not None:
            return SchemaShape.TYPED_MAP
        if schema.allows_any_additional:
            return SchemaShape.OPEN_MAP
    if schema.has_type("object"):
        return SchemaShape.OBJECT
    return SchemaShape.UNKNOWN


def defines_structured_object(schema: SchemaNode) -> bool:
    """Return whether an inline schema declares members worth a dedicated model."""
    return bool(schema.properties) or bool(schema.all_of)


def classify_schema(schema: SchemaNode) -> SchemaKind:
    """Classify a named schema as an enum, an object model or an alias."""
    if schema.enum:
        return SchemaKind.ENUM
    if defines_structured_object(schema):
        return SchemaKind.OBJECT
    if schema.has_type("object"):
        return SchemaKind.OBJECT
    if schema.value_schema is not None:
        return SchemaKind.OBJECT
    return SchemaKind.ALIAS


def enum_literal(value: Any) -> str:
    """Render an enum literal as the text sent on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True)


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Collapse whitespace runs; return ``None`` for blank text."""
    if value is None:
        return None
    text = " ".join(value.split())
    return text or None
