"""Build model records from named and inline object schemas."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .context import GenerationContext, PendingInlineModel
from .model_types import (
    EnumMemberRecord,
    ModelRecord,
    PropertyRecord,
    SchemaKind,
    SchemaTypeInfo,
    mentions_json,
)
from .naming import NameRegistry, pascal_identifier
from .resolver import OPAQUE_VALUE, TypeResolver
from .schema_utils import classify_schema, enum_literal, sanitize_text
from .spec_graph import SchemaNode

_RESERVED_MEMBER_SUFFIX = "Value"
_RESERVED_MEMBER_NAMES = frozenset({"AdditionalProperties", "ToString"})


def build_enum_members(values: tuple[str, ...]) -> tuple[EnumMemberRecord, ...]:
    """Create enum members with unique identifiers, in declaration order."""
    registry = NameRegistry()
    return tuple(
        EnumMemberRecord(name=registry.reserve(pascal_identifier(value)), value=value)
        for value in values
    )


class ModelAssembler:
    """Create model records for one generation run.

    Named schemas are classified first so that every reference can be
    resolved before any model is built. Inline object schemas found while
    resolving types are queued and built by :meth:`drain_inline_models`.
    """

    def __init__(self, context: GenerationContext) -> None:
        self._context = context
        self.resolver = TypeResolver(context, self.create_inline_model)
        self._models: dict[str, ModelRecord] = {}

    def classify(self) -> None:
        """Reserve type names for all named schemas and resolve alias targets."""
        named = self._context.graph.named_schemas()
        for source_name in sorted(named):
            schema = named[source_name]
            info = SchemaTypeInfo(
                name=source_name,
                type_name=self._context.model_names.reserve(pascal_identifier(source_name)),
                schema=schema,
                kind=classify_schema(schema),
                nullable=schema.is_nullable,
            )
            if info.kind is SchemaKind.ENUM:
                info.enum_values = tuple(enum_literal(value) for value in schema.enum or ())
            self._context.schema_types[source_name] = info

        for source_name in sorted(self._context.schema_types):
            info = self._context.schema_types[source_name]
            if info.kind is SchemaKind.ALIAS:
                self.resolver.alias_target(info)

    def build_models(self) -> None:
        """Build records for every enum and object schema, then any queued inline models."""
        for source_name in sorted(self._context.schema_types):
            info = self._context.schema_types[source_name]
            if info.kind is SchemaKind.ENUM:
                self._add(
                    ModelRecord(
                        name=info.type_name,
                        kind=SchemaKind.ENUM,
                        description=sanitize_text(info.schema.description),
                        enum_members=build_enum_members(info.enum_values),
                    )
                )
            elif info.kind is SchemaKind.OBJECT:
                self._add(self._build_class_model(info.type_name, info.schema))
        self.drain_inline_models()

    def create_inline_model(self, hint: str, schema: SchemaNode) -> str:
        """Reserve a model name for an inline object schema and queue its build.

        Args:
            hint (str): Preferred model name derived from the owning context.
            schema (SchemaNode): Inline schema declaring properties or composition.

        Returns:
            str: The reserved model name.
        """
        name = self._context.model_names.reserve(hint)
        self._context.pending_inline.append(PendingInlineModel(name=name, schema=schema))
        return name

    def drain_inline_models(self) -> None:
        """Build queued inline models; building one may queue more."""
        while self._context.pending_inline:
            pending = self._context.pending_inline.popleft()
            self._add(self._build_class_model(pending.name, pending.schema))

    def finalize(self) -> tuple[ModelRecord, ...]:
        """Return all models sorted by name with error-payload flags applied."""
        records: list[ModelRecord] = []
        for name in sorted(self._models):
            record = self._models[name]
            if name in self._context.error_models and record.kind is SchemaKind.OBJECT:
                record = replace(record, emit_to_string=True, uses_json=True)
            records.append(record)
        return tuple(records)

    def _add(self, record: ModelRecord) -> None:
        self._models[record.name] = record

    def _build_class_model(self, name: str, schema: SchemaNode) -> ModelRecord:
        properties = self._collect_properties(name, schema)
        uses_collections = any(prop.type.is_collection for prop in properties)
        uses_json = any(prop.type.uses_json for prop in properties)

        extension_type: Optional[str] = None
        if schema.value_schema is not None:
            extension_type = self.resolver.resolve_inline(
                schema.value_schema, True, f"{name}Value"
            ).base_name
        elif schema.allows_any_additional:
            extension_type = OPAQUE_VALUE
        if extension_type is not None:
            uses_collections = True
            uses_json = uses_json or mentions_json(extension_type)

        return ModelRecord(
            name=name,
            kind=SchemaKind.OBJECT,
            description=sanitize_text(schema.description),
            properties=properties,
            extension_value_type=extension_type,
            uses_collections=uses_collections,
            uses_json=uses_json,
        )

    def _collect_properties(self, owner: str, schema: SchemaNode) -> tuple[PropertyRecord, ...]:
        sources = self._composition_sources(owner, schema)
        declared: dict[str, SchemaNode] = {}
        required_names: set[str] = set()
        for source in sources:
            for json_name, prop_schema in (source.properties or {}).items():
                if json_name in declared:
                    if declared[json_name] != prop_schema:
                        self._context.warn(
                            f"Property {json_name!r} of {owner} is declared more than once "
                            "with different schemas; keeping the first declaration"
                        )
                    continue
                declared[json_name] = prop_schema
                if json_name in source.required:
                    required_names.add(json_name)

        member_names = NameRegistry(_RESERVED_MEMBER_NAMES)
        properties: list[PropertyRecord] = []
        for json_name in sorted(declared, key=lambda name: (pascal_identifier(name), name)):
            prop_schema = declared[json_name]
            required = json_name in required_names
            base_name = pascal_identifier(json_name)
            if base_name == owner or base_name in _RESERVED_MEMBER_NAMES:
                base_name = f"{base_name}{_RESERVED_MEMBER_SUFFIX}"
            descriptor = self.resolver.resolve_inline(
                prop_schema,
                required,
                f"{owner}{pascal_identifier(json_name)}",
            )
            properties.append(
                PropertyRecord(
                    name=member_names.reserve(base_name),
                    json_name=json_name,
                    type=descriptor,
                    required=required,
                    description=self._description(prop_schema),
                    needs_initializer=(
                        required and not descriptor.is_value_type and not descriptor.nullable
                    ),
                )
            )
        return tuple(properties)

    def _composition_sources(self, owner: str, schema: SchemaNode) -> list[SchemaNode]:
        # Pre-order walk: the schema itself, then each allOf branch in document order.
        sources: list[SchemaNode] = []
        visited_refs: set[str] = set()
        stack: list[SchemaNode] = [schema]
        while stack:
            node = stack.pop()
            if node.ref is not None:
                if node.ref in visited_refs:
                    continue
                visited_refs.add(node.ref)
                target = self._context.graph.schema_for_ref(node.ref)
                if target is None:
                    self._context.warn(
                        f"Unresolved allOf reference {node.ref!r} in {owner}; branch skipped"
                    )
                    continue
                node = target
            sources.append(node)
            stack.extend(reversed(node.all_of))
        return sources

    def _description(self, schema: SchemaNode) -> Optional[str]:
        if schema.ref is not None:
            target = self._context.graph.schema_for_ref(schema.ref)
            if target is not None:
                return sanitize_text(target.description)
        return sanitize_text(schema.description)

