"""Typed OpenAPI specification graph consumed by the generator core."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .model_types import OperationSpec

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)

JSON_MEDIA_TYPE = "application/json"
_EXTENSION_PREFIX = "x-"


class _Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SchemaNode(_Node):
    """A schema, either declared inline or pointing at a named schema via ``$ref``."""

    ref: Optional[str] = Field(default=None, alias="$ref")
    type: Optional[Union[str, list[str]]] = None
    format: Optional[str] = None
    nullable: bool = False
    enum: Optional[list[Any]] = None
    properties: Optional[dict[str, SchemaNode]] = None
    required: list[str] = Field(default_factory=list)
    all_of: list[SchemaNode] = Field(default_factory=list, alias="allOf")
    additional_properties: Optional[Union[bool, SchemaNode]] = Field(
        default=None,
        alias="additionalProperties",
    )
    items: Optional[Union[bool, SchemaNode]] = None
    description: Optional[str] = None

    @field_validator("required", mode="before")
    @classmethod
    def _required_names(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [name for name in value if isinstance(name, str)]

    @field_validator("enum", mode="before")
    @classmethod
    def _enum_literals(cls, value: Any) -> Any:
        return value if isinstance(value, list) else None

    @field_validator("nullable", mode="before")
    @classmethod
    def _nullable_flag(cls, value: Any) -> Any:
        return value is True

    @property
    def is_reference(self) -> bool:
        return self.ref is not None

    @property
    def types(self) -> tuple[str, ...]:
        """Declared types, lower-cased, without the 3.1 ``null`` member."""
        if self.type is None:
            return ()
        raw = [self.type] if isinstance(self.type, str) else self.type
        return tuple(item.lower() for item in raw if item.lower() != "null")

    def has_type(self, name: str) -> bool:
        return name in self.types

    @property
    def is_nullable(self) -> bool:
        if self.nullable:
            return True
        return isinstance(self.type, list) and any(item.lower() == "null" for item in self.type)

    @property
    def value_schema(self) -> Optional[SchemaNode]:
        """Schema of open-map values when ``additionalProperties`` is a schema."""
        if isinstance(self.additional_properties, SchemaNode):
            return self.additional_properties
        return None

    @property
    def allows_any_additional(self) -> bool:
        return self.additional_properties is True

    @property
    def item_schema(self) -> Optional[SchemaNode]:
        if isinstance(self.items, SchemaNode):
            return self.items
        return None


class MediaTypeNode(_Node):
    media_schema: Optional[SchemaNode] = Field(default=None, alias="schema")


class ParameterNode(_Node):
    """An operation parameter or a ``$ref`` to a shared one."""

    ref: Optional[str] = Field(default=None, alias="$ref")
    name: str = ""
    location: str = Field(default="", alias="in")
    required: bool = False
    description: Optional[str] = None
    param_schema: Optional[SchemaNode] = Field(default=None, alias="schema")
    content: dict[str, MediaTypeNode] = Field(default_factory=dict)


class RequestBodyNode(_Node):
    ref: Optional[str] = Field(default=None, alias="$ref")
    description: Optional[str] = None
    required: bool = False
    content: dict[str, MediaTypeNode] = Field(default_factory=dict)


class ResponseNode(_Node):
    ref: Optional[str] = Field(default=None, alias="$ref")
    description: Optional[str] = None
    content: dict[str, MediaTypeNode] = Field(default_factory=dict)


class OperationNode(BaseModel):
    """One HTTP operation; ``x-`` extension keys are kept as extra fields."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tags: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    parameters: list[ParameterNode] = Field(default_factory=list)
    request_body: Optional[RequestBodyNode] = Field(default=None, alias="requestBody")
    responses: dict[str, ResponseNode] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_names(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [str(tag) for tag in value if tag is not None]

    @field_validator("responses", mode="before")
    @classmethod
    def _status_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {
            str(code): response
            for code, response in value.items()
            if isinstance(response, dict) and not str(code).startswith(_EXTENSION_PREFIX)
        }

    @property
    def extensions(self) -> dict[str, Any]:
        extra = self.model_extra or {}
        return {key: value for key, value in extra.items() if key.startswith(_EXTENSION_PREFIX)}


class PathItemNode(_Node):
    parameters: list[ParameterNode] = Field(default_factory=list)
    get: Optional[OperationNode] = None
    put: Optional[OperationNode] = None
    post: Optional[OperationNode] = None
    delete: Optional[OperationNode] = None
    options: Optional[OperationNode] = None
    head: Optional[OperationNode] = None
    patch: Optional[OperationNode] = None
    trace: Optional[OperationNode] = None

    def operations(self) -> Iterator[tuple[str, OperationNode]]:
        """Yield ``(method, operation)`` pairs in a fixed verb order."""
        for method in HTTP_METHODS:
            operation = getattr(self, method)
            if operation is not None:
                yield method, operation


class ComponentsNode(_Node):
    schemas: dict[str, SchemaNode] = Field(default_factory=dict)
    parameters: dict[str, ParameterNode] = Field(default_factory=dict)
    request_bodies: dict[str, RequestBodyNode] = Field(default_factory=dict, alias="requestBodies")
    responses: dict[str, ResponseNode] = Field(default_factory=dict)


class InfoNode(_Node):
    title: Optional[str] = None
    version: Optional[str] = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_text(cls, value: Any) -> Any:
        return None if value is None else str(value)


class SpecDocument(_Node):
    """Root of a loaded OpenAPI 3.x document."""

    openapi: str
    info: InfoNode = Field(default_factory=InfoNode)
    paths: dict[str, PathItemNode] = Field(default_factory=dict)
    components: ComponentsNode = Field(default_factory=ComponentsNode)

    @field_validator("openapi", mode="before")
    @classmethod
    def _version_text(cls, value: Any) -> Any:
        return str(value)

    @field_validator("paths", mode="before")
    @classmethod
    def _path_items(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {
            str(path): item
            for path, item in value.items()
            if isinstance(item, dict) and not str(path).startswith(_EXTENSION_PREFIX)
        }

    @field_validator("components", mode="before")
    @classmethod
    def _components(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


def component_name(ref: str) -> str:
    """Return the trailing name of a ``$ref`` pointer."""
    token = ref.rsplit("/", maxsplit=1)[-1]
    return token.replace("~1", "/").replace("~0", "~")


def media_type_essence(media_type: str) -> str:
    return media_type.split(";", maxsplit=1)[0].strip().lower()


def preferred_media(content: dict[str, MediaTypeNode]) -> Optional[tuple[str, SchemaNode]]:
    """Pick the media type whose schema describes a payload, favouring JSON.

    Args:
        content (dict[str, MediaTypeNode]): Declared media types in document order.

    Returns:
        Optional[tuple[str, SchemaNode]]: Chosen media type and its schema.
    """
    with_schema = [
        (media_type, media.media_schema)
        for media_type, media in content.items()
        if media.media_schema is not None
    ]
    for media_type, schema in with_schema:
        if media_type_essence(media_type) == JSON_MEDIA_TYPE:
            return media_type, schema
    for media_type, schema in with_schema:
        essence = media_type_essence(media_type)
        if essence.endswith("+json") or essence == "text/json":
            return media_type, schema
    if with_schema:
        return with_schema[0]
    return None


def preferred_schema(content: dict[str, MediaTypeNode]) -> Optional[SchemaNode]:
    chosen = preferred_media(content)
    return chosen[1] if chosen is not None else None


def first_content_type(content: dict[str, MediaTypeNode]) -> Optional[str]:
    return next(iter(content), None)


class SpecificationGraph:
    """Name-based reference resolution over a loaded document."""

    def __init__(self, document: SpecDocument) -> None:
        self._document = document

    @property
    def document(self) -> SpecDocument:
        return self._document

    @property
    def api_version(self) -> str:
        version = (self._document.info.version or "").strip()
        return version or "1.0.0"

    def named_schemas(self) -> dict[str, SchemaNode]:
        return self._document.components.schemas

    def schema_for_ref(self, ref: str) -> Optional[SchemaNode]:
        return self._document.components.schemas.get(component_name(ref))

    def parameter(self, node: ParameterNode) -> Optional[ParameterNode]:
        """Follow ``$ref`` links to the concrete parameter, or ``None``."""
        return _follow(node, self._document.components.parameters, "parameters")

    def request_body(self, node: RequestBodyNode) -> Optional[RequestBodyNode]:
        return _follow(node, self._document.components.request_bodies, "requestBodies")

    def response(self, node: ResponseNode) -> Optional[ResponseNode]:
        return _follow(node, self._document.components.responses, "responses")

    def iter_operations(self) -> Iterator[OperationSpec]:
        """Yield every operation, paths in lexicographic order."""
        for path in sorted(self._document.paths):
            path_item = self._document.paths[path]
            for method, operation in path_item.operations():
                yield OperationSpec(
                    path=path,
                    method=method,
                    operation=operation,
                    path_item=path_item,
                )


NodeT = TypeVar("NodeT", ParameterNode, RequestBodyNode, ResponseNode)


def _follow(
    node: NodeT,
    table: dict[str, NodeT],
    section: str,
) -> Optional[NodeT]:
    prefix = f"#/components/{section}/"
    seen: set[str] = set()
    current = node
    while current.ref is not None:
        ref = current.ref
        if ref in seen or not ref.startswith(prefix):
            return None
        seen.add(ref)
        target = table.get(component_name(ref))
        if target is None:
            return None
        current = target
    return current


SchemaNode.model_rebuild()
OperationNode.model_rebuild()
PathItemNode.model_rebuild()
SpecDocument.model_rebuild()
