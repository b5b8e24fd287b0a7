"""Unit tests for model assembly."""

from __future__ import annotations

from typing import Any

from openapi_to_csharp_generator.model_types import ModelRecord, SchemaKind
from openapi_to_csharp_generator.schema_to_models import build_enum_members

from .fixture_helpers import classified_assembler, openapi_document


def _models(schemas: dict[str, Any]) -> tuple[dict[str, ModelRecord], list[str]]:
    assembler, context = classified_assembler(openapi_document(schemas=schemas))
    assembler.build_models()
    return {model.name: model for model in assembler.finalize()}, context.warnings


def test_aliases_are_not_emitted() -> None:
    """Only enum and object schemas become models."""
    models, _ = _models(
        {
            "Id": {"type": "string"},
            "Ids": {"type": "array", "items": {"type": "string"}},
            "Color": {"type": "string", "enum": ["red", "green"]},
            "Point": {"type": "object", "properties": {"x": {"type": "number"}}},
        }
    )
    assert sorted(models) == ["Color", "Point"]
    assert models["Color"].kind is SchemaKind.ENUM
    assert models["Point"].kind is SchemaKind.OBJECT


def test_property_records_follow_required_and_value_type_rules() -> None:
    """Only required, non-value, non-nullable properties need an initializer."""
    models, _ = _models(
        {
            "Order": {
                "type": "object",
                "required": ["id", "reference", "note"],
                "properties": {
                    "reference": {"type": "string"},
                    "id": {"type": "integer"},
                    "note": {"type": "string", "nullable": True},
                    "comment": {"type": "string"},
                },
            }
        }
    )
    props = {prop.json_name: prop for prop in models["Order"].properties}
    assert [prop.json_name for prop in models["Order"].properties] == [
        "comment",
        "id",
        "note",
        "reference",
    ]
    assert props["reference"].needs_initializer
    assert props["reference"].type.type_name == "string"
    assert not props["id"].needs_initializer
    assert props["id"].type.type_name == "int"
    assert props["note"].type.type_name == "string?"
    assert not props["note"].needs_initializer
    assert props["comment"].type.type_name == "string?"
    assert not props["comment"].required


def test_all_of_composition_collects_branch_properties() -> None:
    """Properties come from every allOf branch; requiredness from the declaring one."""
    models, warnings = _models(
        {
            "Base": {
                "type": "object",
                "required": ["id"],
                "properties": {"id": {"type": "string"}},
            },
            "Timestamps": {
                "allOf": [
                    {"type": "object", "properties": {"created": {"type": "string"}}},
                ]
            },
            "Derived": {
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {"$ref": "#/components/schemas/Timestamps"},
                    {
                        "type": "object",
                        "required": ["created"],
                        "properties": {"extra": {"type": "boolean"}},
                    },
                ]
            },
        }
    )
    derived = {prop.json_name: prop for prop in models["Derived"].properties}
    assert sorted(derived) == ["created", "extra", "id"]
    assert derived["id"].required
    assert not derived["created"].required
    assert not derived["extra"].required
    assert warnings == []


def test_conflicting_all_of_declarations_keep_the_first_and_warn() -> None:
    """Redeclaring a property with another schema keeps the first one."""
    models, warnings = _models(
        {
            "Thing": {
                "allOf": [
                    {"type": "object", "properties": {"size": {"type": "integer"}}},
                    {"type": "object", "properties": {"size": {"type": "string"}}},
                ]
            }
        }
    )
    (size,) = models["Thing"].properties
    assert size.type.type_name == "int?"
    assert any("'size' of Thing" in warning for warning in warnings)


def test_self_referencing_all_of_terminates() -> None:
    """A branch that points back at its owner is visited once."""
    models, _ = _models(
        {
            "Node": {
                "type": "object",
                "properties": {"value": {"type": "string"}},
                "allOf": [{"$ref": "#/components/schemas/Node"}],
            }
        }
    )
    assert [prop.name for prop in models["Node"].properties] == ["Value"]


def test_member_names_are_unique_and_avoid_owner_name() -> None:
    """Colliding and owner-named properties are renamed."""
    models, _ = _models(
        {
            "Widget": {
                "type": "object",
                "properties": {
                    "widget": {"type": "string"},
                    "first-name": {"type": "string"},
                    "first_name": {"type": "string"},
                    "AdditionalProperties": {"type": "string"},
                },
            }
        }
    )
    names = {prop.json_name: prop.name for prop in models["Widget"].properties}
    assert names == {
        "AdditionalProperties": "AdditionalPropertiesValue",
        "first-name": "FirstName",
        "first_name": "FirstName2",
        "widget": "WidgetValue",
    }


def test_extension_data_for_open_objects() -> None:
    """Free-form and typed additional properties become extension data."""
    models, _ = _models(
        {
            "Bag": {"type": "object", "additionalProperties": True},
            "Counts": {"type": "object", "additionalProperties": {"type": "integer"}},
            "Closed": {"type": "object", "properties": {"a": {"type": "string"}}},
        }
    )
    assert models["Bag"].extension_value_type == "JsonElement"
    assert models["Bag"].uses_json and models["Bag"].uses_collections
    assert models["Counts"].extension_value_type == "int"
    assert not models["Counts"].uses_json
    assert models["Closed"].extension_value_type is None
    assert not models["Closed"].uses_collections


def test_nested_inline_objects_are_built_transitively() -> None:
    """Inline objects inside inline objects each become a model."""
    models, _ = _models(
        {
            "Invoice": {
                "type": "object",
                "properties": {
                    "customer": {
                        "type": "object",
                        "properties": {
                            "address": {
                                "type": "object",
                                "properties": {"city": {"type": "string"}},
                            }
                        },
                    },
                    "lines": {
                        "type": "array",
                        "items": {"type": "object", "properties": {"sku": {"type": "string"}}},
                    },
                },
            }
        }
    )
    assert sorted(models) == [
        "Invoice",
        "InvoiceCustomer",
        "InvoiceCustomerAddress",
        "InvoiceLinesItem",
    ]
    invoice = {prop.json_name: prop for prop in models["Invoice"].properties}
    assert invoice["customer"].type.type_name == "InvoiceCustomer?"
    assert invoice["lines"].type.type_name == "IEnumerable<InvoiceLinesItem>?"
    assert models["Invoice"].uses_collections


def test_named_schema_collision_gets_numeric_suffix() -> None:
    """Two schema names that normalize alike get distinct type names."""
    models, _ = _models(
        {
            "pet_owner": {"type": "object", "properties": {"a": {"type": "string"}}},
            "PetOwner": {"type": "object", "properties": {"b": {"type": "string"}}},
        }
    )
    assert sorted(models) == ["PetOwner", "PetOwner2"]
    assert models["PetOwner"].properties[0].json_name == "b"
    assert models["PetOwner2"].properties[0].json_name == "a"


def test_enum_members_are_unique_and_keep_wire_values() -> None:
    """Duplicate member identifiers are numbered; non-string literals are stringified."""
    models, _ = _models(
        {"Mode": {"enum": ["fast-mode", "FAST_MODE", 1, True, None]}},
    )
    members = [(member.name, member.value) for member in models["Mode"].enum_members]
    assert members == [
        ("FastMode", "fast-mode"),
        ("FastMode2", "FAST_MODE"),
        ("_1", "1"),
        ("TrueValue", "true"),
        ("NullValue", "null"),
    ]


def test_build_enum_members_skips_taken_suffixes() -> None:
    """Numbered names never collide with literal member names."""
    members = build_enum_members(("a", "a2", "A"))
    assert [member.name for member in members] == ["A", "A2", "A3"]


def test_properties_are_ordered_by_member_name() -> None:
    """Ordering ignores the case of the source names."""
    models, _ = _models(
        {
            "Mixed": {
                "type": "object",
                "properties": {
                    "Zeta": {"type": "string"},
                    "alpha": {"type": "string"},
                    "beta_value": {"type": "string"},
                    "Beta": {"type": "string"},
                },
            }
        }
    )
    assert [prop.name for prop in models["Mixed"].properties] == [
        "Alpha",
        "Beta",
        "BetaValue",
        "Zeta",
    ]
