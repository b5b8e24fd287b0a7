"""Schema-to-type resolution for generated C# code."""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional, TypeAlias

from .context import GenerationContext
from .model_types import (
    NULLABLE_MARKER,
    SchemaKind,
    SchemaTypeInfo,
    TypeDescriptor,
    is_collection_name,
)
from .schema_utils import SchemaShape, defines_structured_object, schema_shape
from .spec_graph import SchemaNode

OPAQUE_DOCUMENT = "JsonDocument"
OPAQUE_VALUE = "JsonElement"
TEXT_TYPE = "string"

_STRING_FORMATS: dict[str, str] = {
    "date-time": "DateTimeOffset",
    "date": "DateTime",
    "uuid": "Guid",
    "byte": "byte[]",
    "binary": "byte[]",
}
_INTEGER_FORMATS: dict[str, str] = {"int64": "long"}
_NUMBER_FORMATS: dict[str, str] = {"float": "float", "double": "double"}

InlineModelFactory: TypeAlias = Callable[[str, SchemaNode], str]


def sequence_of(item_type: str) -> str:
    return f"IEnumerable<{item_type}>"


def mapping_of(value_type: str) -> str:
    return f"IDictionary<string, {value_type}>"


def describe(type_name: str, *, value_type: bool, required: bool) -> TypeDescriptor:
    """Build a descriptor, appending the nullable marker for optional slots."""
    nullable = type_name.endswith(NULLABLE_MARKER)
    if not required and not nullable:
        type_name = f"{type_name}{NULLABLE_MARKER}"
        nullable = True
    return TypeDescriptor(
        type_name=type_name,
        nullable=nullable,
        is_value_type=value_type,
        is_collection=is_collection_name(type_name),
    )


class TypeResolver:
    """Map schema nodes to type descriptors.

    ``create_inline_model`` is called with a name hint and an inline object
    schema; it returns the reserved model name and schedules the model build.
    """

    def __init__(
        self,
        context: GenerationContext,
        create_inline_model: InlineModelFactory,
    ) -> None:
        self._context = context
        self._create_inline_model = create_inline_model
        self._resolving_aliases: set[str] = set()

    def resolve(self, schema: Optional[SchemaNode], required: bool) -> TypeDescriptor:
        """Resolve a schema without synthesizing models for inline objects.

        Args:
            schema (Optional[SchemaNode]): Schema to map; ``None`` maps to the opaque document.
            required (bool): Whether the slot holding the value is required.

        Returns:
            TypeDescriptor: Resolved type.
        """
        if schema is None:
            return describe(OPAQUE_DOCUMENT, value_type=False, required=required)
        if schema.is_nullable:
            required = False

        shape = schema_shape(schema)
        if shape is SchemaShape.REFERENCE:
            return self._resolve_reference(schema.ref or "", required)
        if shape is SchemaShape.STRING:
            type_name = _STRING_FORMATS.get(schema.format or "", TEXT_TYPE)
            return describe(type_name, value_type=False, required=required)
        if shape is SchemaShape.INTEGER:
            type_name = _INTEGER_FORMATS.get(schema.format or "", "int")
            return describe(type_name, value_type=True, required=required)
        if shape is SchemaShape.NUMBER:
            type_name = _NUMBER_FORMATS.get(schema.format or "", "decimal")
            return describe(type_name, value_type=True, required=required)
        if shape is SchemaShape.BOOLEAN:
            return describe("bool", value_type=True, required=required)
        if shape is SchemaShape.ARRAY:
            item = self.resolve(schema.item_schema, True)
            return describe(sequence_of(item.base_name), value_type=False, required=required)
        if shape is SchemaShape.TYPED_MAP:
            value = self.resolve(schema.value_schema, True)
            return describe(mapping_of(value.base_name), value_type=False, required=required)
        if shape is SchemaShape.OPEN_MAP:
            return describe(mapping_of(OPAQUE_VALUE), value_type=False, required=required)
        if shape in (SchemaShape.OBJECT, SchemaShape.UNKNOWN):
            return describe(OPAQUE_DOCUMENT, value_type=False, required=required)
        raise ValueError(f"Unhandled schema shape: {shape}")

    def resolve_inline(
        self,
        schema: Optional[SchemaNode],
        required: bool,
        hint: str,
    ) -> TypeDescriptor:
        """Resolve a schema, turning inline structured objects into named models.

        Array items and map values recurse with ``{hint}Item`` and ``{hint}Value``.
        """
        if schema is None or schema.is_reference or not hint:
            return self.resolve(schema, required)
        if schema.is_nullable:
            required = False

        if defines_structured_object(schema):
            name = self._create_inline_model(hint, schema)
            return describe(name, value_type=False, required=required)

        shape = schema_shape(schema)
        if shape is SchemaShape.TYPED_MAP:
            value = self.resolve_inline(schema.value_schema, True, f"{hint}Value")
            return describe(mapping_of(value.base_name), value_type=False, required=required)
        if shape is SchemaShape.ARRAY:
            item = self.resolve_inline(schema.item_schema, True, f"{hint}Item")
            return describe(sequence_of(item.base_name), value_type=False, required=required)
        return self.resolve(schema, required)

    def alias_target(self, info: SchemaTypeInfo) -> tuple[str, bool]:
        """Return ``(type_name, is_value_type)`` an alias schema stands for.

        Targets are resolved on first use and cached on ``info``. A chain of
        aliases that loops back on itself resolves to the opaque document.
        """
        if info.alias_type is not None:
            return info.alias_type, info.alias_is_value_type
        if info.name in self._resolving_aliases:
            self._context.warn(
                f"Schema {info.name!r} is part of a circular alias chain; using {OPAQUE_DOCUMENT}"
            )
            return OPAQUE_DOCUMENT, False

        self._resolving_aliases.add(info.name)
        try:
            target = self.resolve_inline(info.schema, True, info.type_name)
        finally:
            self._resolving_aliases.discard(info.name)
        info.alias_type = target.base_name
        info.alias_is_value_type = target.is_value_type
        return info.alias_type, info.alias_is_value_type

    def _resolve_reference(self, ref: str, required: bool) -> TypeDescriptor:
        info = self._context.schema_info(ref)
        if info is None:
            self._context.warn(f"Unresolved schema reference {ref!r}; using {OPAQUE_DOCUMENT}")
            return describe(OPAQUE_DOCUMENT, value_type=False, required=required)
        if info.nullable:
            required = False
        if info.kind is SchemaKind.ENUM:
            return describe(info.type_name, value_type=True, required=required)
        if info.kind is SchemaKind.OBJECT:
            return describe(info.type_name, value_type=False, required=required)
        type_name, value_type = self.alias_target(info)
        return describe(type_name, value_type=value_type, required=required)
