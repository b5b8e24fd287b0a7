"""Internal datatypes shared by the assemblers and the rendering layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .spec_graph import OperationNode, PathItemNode, SchemaNode

NULLABLE_MARKER = "?"
JSON_TYPE_MARKERS: tuple[str, ...] = ("JsonDocument", "JsonElement")
COLLECTION_PREFIXES: tuple[str, ...] = ("IEnumerable<", "IDictionary<")
CLIENT_CLASS_SUFFIX = "Client"

# Types the generated sources refer to by short name; no generated class may reuse them.
RUNTIME_TYPE_NAMES: frozenset[str] = frozenset(
    {
        "ApiClient",
        "ApiException",
        "ApiResponse",
        "CancellationToken",
        "DateTime",
        "DateTimeOffset",
        "Guid",
        "HttpMethod",
        "JsonDocument",
        "JsonElement",
        "JsonSerializer",
        "RequestOptions",
        "Task",
    }
)


class SchemaKind(Enum):
    """Classification of a named schema."""

    ALIAS = "alias"
    OBJECT = "object"
    ENUM = "enum"


class ResponseMode(Enum):
    """How an operation's success payload is decoded."""

    NONE = "none"
    STRING = "string"
    JSON_DOCUMENT = "json-document"
    JSON = "json"


def mentions_json(type_name: str) -> bool:
    return any(marker in type_name for marker in JSON_TYPE_MARKERS)


def is_collection_name(type_name: str) -> bool:
    return type_name.startswith(COLLECTION_PREFIXES)


@dataclass(frozen=True)
class TypeDescriptor:
    """A resolved C# type reference."""

    type_name: str
    nullable: bool = False
    is_value_type: bool = False
    is_collection: bool = False

    @property
    def base_name(self) -> str:
        return self.type_name.removesuffix(NULLABLE_MARKER)

    @property
    def uses_json(self) -> bool:
        return mentions_json(self.type_name)


@dataclass
class SchemaTypeInfo:
    """Per-run facts about one named schema."""

    name: str
    type_name: str
    schema: SchemaNode
    kind: SchemaKind = SchemaKind.ALIAS
    nullable: bool = False
    enum_values: tuple[str, ...] = ()
    alias_type: Optional[str] = None
    alias_is_value_type: bool = False


@dataclass(frozen=True)
class PropertyRecord:
    name: str
    json_name: str
    type: TypeDescriptor
    required: bool
    description: Optional[str]
    needs_initializer: bool


@dataclass(frozen=True)
class EnumMemberRecord:
    name: str
    value: str


@dataclass(frozen=True)
class ModelRecord:
    """Represents one emitted model, either a class or an enum."""

    name: str
    kind: SchemaKind
    description: Optional[str] = None
    properties: tuple[PropertyRecord, ...] = ()
    enum_members: tuple[EnumMemberRecord, ...] = ()
    extension_value_type: Optional[str] = None
    uses_collections: bool = False
    uses_json: bool = False
    emit_to_string: bool = False

    @property
    def is_enum(self) -> bool:
        return self.kind is SchemaKind.ENUM


@dataclass(frozen=True)
class ParameterRecord:
    """A path, query or header argument of a generated method."""

    location: str
    name: str
    arg_name: str
    type: TypeDescriptor
    required: bool
    description: Optional[str]
    signature: str


@dataclass(frozen=True)
class RequestBodyRecord:
    arg_name: str
    type: TypeDescriptor
    required: bool
    description: Optional[str]
    content_type: str
    signature: str


@dataclass(frozen=True)
class ErrorResponseRecord:
    """Maps a non-success status code, or the default response, to a type."""

    status_code: Optional[str]
    error_type: str

    @property
    def is_default(self) -> bool:
        return self.status_code is None


@dataclass(frozen=True)
class OperationRecord:
    """Represents one generated client method."""

    method_name: str
    http_method: str
    path: str
    summary: str
    description: Optional[str]
    path_params: tuple[ParameterRecord, ...]
    query_params: tuple[ParameterRecord, ...]
    header_params: tuple[ParameterRecord, ...]
    body: Optional[RequestBodyRecord]
    response_type: TypeDescriptor
    response_mode: ResponseMode
    error_responses: tuple[ErrorResponseRecord, ...] = ()

    @property
    def parameters(self) -> tuple[ParameterRecord, ...]:
        return self.path_params + self.query_params + self.header_params

    @property
    def arguments(self) -> tuple[str, ...]:
        """Method argument declarations, required ones before optional ones."""
        declared: list[tuple[bool, str]] = [
            (param.required, param.signature) for param in self.parameters
        ]
        if self.body is not None:
            declared.append((self.body.required, self.body.signature))
        required = [signature for is_required, signature in declared if is_required]
        optional = [signature for is_required, signature in declared if not is_required]
        return tuple(required + optional)

    @property
    def has_request_parameters(self) -> bool:
        return bool(self.parameters)

    @property
    def result_type(self) -> str:
        if self.response_mode is ResponseMode.NONE:
            return "object"
        if self.response_mode is ResponseMode.STRING:
            return "string"
        if self.response_mode is ResponseMode.JSON_DOCUMENT:
            return "JsonDocument"
        return self.response_type.type_name

    @property
    def uses_collections(self) -> bool:
        types = [param.type for param in self.parameters] + [self.response_type]
        if self.body is not None:
            types.append(self.body.type)
        return any(descriptor.is_collection for descriptor in types)


@dataclass(frozen=True)
class ClientRecord:
    """A tag-scoped client class."""

    name: str
    operations: tuple[OperationRecord, ...]

    @property
    def class_name(self) -> str:
        return f"{self.name}{CLIENT_CLASS_SUFFIX}"

    @property
    def property_name(self) -> str:
        return self.name

    @property
    def uses_collections(self) -> bool:
        return any(operation.uses_collections for operation in self.operations)


@dataclass(frozen=True)
class RootClientRecord:
    namespace: str
    class_name: str
    clients: tuple[ClientRecord, ...]


@dataclass(frozen=True)
class ApiVersionRecord:
    namespace: str
    api_version: str


@dataclass(frozen=True)
class OperationSpec:
    """Operation metadata extracted from OpenAPI paths."""

    path: str
    method: str
    operation: OperationNode
    path_item: PathItemNode

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path}"


@dataclass(frozen=True)
class GenerationResult:
    """Generation output metadata."""

    output_dir: str
    files: tuple[str, ...]
    warnings: tuple[str, ...]
