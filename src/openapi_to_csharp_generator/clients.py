"""Group operations into tag-scoped clients and build method records."""

from __future__ import annotations

from typing import Optional

from .context import GenerationContext
from .model_types import (
    CLIENT_CLASS_SUFFIX,
    RUNTIME_TYPE_NAMES,
    ClientRecord,
    ErrorResponseRecord,
    OperationRecord,
    OperationSpec,
    ParameterRecord,
    RequestBodyRecord,
    ResponseMode,
    TypeDescriptor,
)
from .naming import (
    NameRegistry,
    camel_identifier,
    generate_operation_name,
    is_default_status,
    is_numeric_status_code,
    pascal_identifier,
    status_code_suffix,
)
from .resolver import OPAQUE_DOCUMENT, TEXT_TYPE, TypeResolver, describe
from .schema_utils import sanitize_text
from .spec_graph import (
    ParameterNode,
    ResponseNode,
    first_content_type,
    preferred_media,
)


class GenerationError(RuntimeError):
    """Raised when the document cannot be turned into a client surface."""


DEFAULT_CLIENT_NAME = "Core"
BODY_ARGUMENT = "body"
_CODEGEN_EXTENSION = "x-codegen"
_METHOD_NAME_KEY = "method_name"
_SUCCESS_PREFIX = "2"
_PARAMETER_LOCATIONS: tuple[str, ...] = ("path", "query", "header")
_RESERVED_ARGUMENTS = frozenset(
    {BODY_ARGUMENT, "builder", "cancellationToken", "request", "requestOptions"}
)


def operation_base_name(spec: OperationSpec) -> str:
    """Return the un-normalized method name for an operation.

    An ``x-codegen.method_name`` override wins over ``operationId``; without
    either, the name is derived from the verb and path.
    """
    extension = spec.operation.extensions.get(_CODEGEN_EXTENSION)
    if isinstance(extension, dict):
        override = extension.get(_METHOD_NAME_KEY)
        if isinstance(override, str) and override.strip():
            return override
    operation_id = spec.operation.operation_id
    if operation_id is not None and operation_id.strip():
        return operation_id
    return generate_operation_name(spec.method, spec.path)


def client_name_for(spec: OperationSpec) -> str:
    tags = spec.operation.tags
    if tags:
        return pascal_identifier(tags[0])
    return DEFAULT_CLIENT_NAME


def canonical_http_method(method: str) -> str:
    return method.lower().capitalize()


class ClientAssembler:
    """Build client records from every operation in the document."""

    def __init__(self, context: GenerationContext, resolver: TypeResolver) -> None:
        self._context = context
        self._resolver = resolver

    def build_clients(self) -> tuple[ClientRecord, ...]:
        """Group operations by client and build their method records.

        Returns:
            tuple[ClientRecord, ...]: Clients sorted by name, each with methods sorted by name.

        Raises:
            GenerationError: If the document has no operations, or an operation
                references a parameter or request body that does not exist.
        """
        specs = list(self._context.graph.iter_operations())
        if not specs:
            raise GenerationError("OpenAPI document declares no operations")

        client_names = _client_names({client_name_for(spec) for spec in specs})
        method_names: dict[str, NameRegistry] = {}
        grouped: dict[str, list[OperationRecord]] = {}
        for spec in specs:
            client_name = client_names[client_name_for(spec)]
            registry = method_names.setdefault(client_name, NameRegistry())
            method_name = registry.reserve(pascal_identifier(operation_base_name(spec)))
            record = self._build_operation(spec, client_name=client_name, method_name=method_name)
            grouped.setdefault(client_name, []).append(record)

        return tuple(
            ClientRecord(
                name=client_name,
                operations=tuple(sorted(grouped[client_name], key=lambda op: op.method_name)),
            )
            for client_name in sorted(grouped)
        )

    def _build_operation(
        self,
        spec: OperationSpec,
        *,
        client_name: str,
        method_name: str,
    ) -> OperationRecord:
        prefix = f"{client_name}{method_name}"
        arguments = NameRegistry(_RESERVED_ARGUMENTS)
        parameters = [
            self._convert_parameter(node, prefix=prefix, arguments=arguments)
            for node in self._merge_parameters(spec)
        ]
        body = self._build_request_body(spec, prefix=prefix)
        response_type, response_mode = self._resolve_response(spec, prefix=prefix)
        http_method = canonical_http_method(spec.method)

        return OperationRecord(
            method_name=method_name,
            http_method=http_method,
            path=spec.path,
            summary=sanitize_text(spec.operation.summary) or f"{http_method.upper()} {spec.path}",
            description=sanitize_text(spec.operation.description),
            path_params=tuple(param for param in parameters if param.location == "path"),
            query_params=tuple(param for param in parameters if param.location == "query"),
            header_params=tuple(param for param in parameters if param.location == "header"),
            body=body,
            response_type=response_type,
            response_mode=response_mode,
            error_responses=self._resolve_error_responses(spec, prefix=prefix),
        )

    def _merge_parameters(self, spec: OperationSpec) -> list[ParameterNode]:
        merged: list[ParameterNode] = []
        positions: dict[tuple[str, str], int] = {}
        for node in [*spec.path_item.parameters, *spec.operation.parameters]:
            parameter = self._context.graph.parameter(node)
            if parameter is None:
                raise GenerationError(
                    f"{spec.label}: parameter reference {node.ref!r} cannot be resolved"
                )
            if parameter.location not in _PARAMETER_LOCATIONS or not parameter.name:
                continue
            key = (parameter.location, parameter.name)
            if key in positions:
                merged[positions[key]] = parameter
            else:
                positions[key] = len(merged)
                merged.append(parameter)
        return merged

    def _convert_parameter(
        self,
        parameter: ParameterNode,
        *,
        prefix: str,
        arguments: NameRegistry,
    ) -> ParameterRecord:
        required = parameter.required or parameter.location == "path"
        schema = parameter.param_schema
        if schema is None:
            chosen = preferred_media(parameter.content)
            schema = chosen[1] if chosen is not None else None
        descriptor = self._resolver.resolve_inline(
            schema,
            required,
            f"{prefix}{pascal_identifier(parameter.name)}",
        )
        arg_name = arguments.reserve(camel_identifier(parameter.name))
        return ParameterRecord(
            location=parameter.location,
            name=parameter.name,
            arg_name=arg_name,
            type=descriptor,
            required=required,
            description=sanitize_text(parameter.description),
            signature=_signature(descriptor, arg_name, required),
        )

    def _build_request_body(
        self,
        spec: OperationSpec,
        *,
        prefix: str,
    ) -> Optional[RequestBodyRecord]:
        node = spec.operation.request_body
        if node is None:
            return None
        request_body = self._context.graph.request_body(node)
        if request_body is None:
            raise GenerationError(
                f"{spec.label}: request body reference {node.ref!r} cannot be resolved"
            )
        chosen = preferred_media(request_body.content)
        if chosen is None:
            return None
        content_type, schema = chosen
        descriptor = self._resolver.resolve_inline(schema, request_body.required, f"{prefix}Request")
        return RequestBodyRecord(
            arg_name=BODY_ARGUMENT,
            type=descriptor,
            required=request_body.required,
            description=sanitize_text(request_body.description),
            content_type=content_type,
            signature=_signature(descriptor, BODY_ARGUMENT, request_body.required),
        )

    def _resolve_response(
        self,
        spec: OperationSpec,
        *,
        prefix: str,
    ) -> tuple[TypeDescriptor, ResponseMode]:
        responses = spec.operation.responses
        success_codes = sorted(code for code in responses if code.startswith(_SUCCESS_PREFIX))
        default_code = _default_code(responses)

        candidates = [(code, f"{prefix}Response") for code in success_codes]
        if default_code is not None:
            candidates.append((default_code, f"{prefix}ResponseDefault"))

        for code, hint in candidates:
            response = self._lookup_response(spec, code)
            descriptor = self._response_type(response, hint)
            if descriptor is not None:
                return descriptor, _response_mode(response, descriptor)

        fallback = self._lookup_response(spec, candidates[0][0]) if candidates else None
        return (
            describe(OPAQUE_DOCUMENT, value_type=False, required=True),
            _response_mode(fallback, None),
        )

    def _resolve_error_responses(
        self,
        spec: OperationSpec,
        *,
        prefix: str,
    ) -> tuple[ErrorResponseRecord, ...]:
        responses = spec.operation.responses
        codes = sorted(
            code
            for code in responses
            if not code.startswith(_SUCCESS_PREFIX) and not is_default_status(code)
        )
        default_code = _default_code(responses)
        if default_code is not None:
            codes.append(default_code)

        records: list[ErrorResponseRecord] = []
        for code in codes:
            is_default = is_default_status(code)
            if not is_default and not is_numeric_status_code(code):
                self._context.warn(
                    f"{spec.label}: response code {code!r} is not a three-digit status code; "
                    "no error mapping generated"
                )
                continue
            response = self._lookup_response(spec, code)
            descriptor = self._response_type(response, f"{prefix}Error{status_code_suffix(code)}")
            if descriptor is None:
                continue
            error_type = descriptor.base_name
            self._context.error_models.add(error_type)
            records.append(
                ErrorResponseRecord(
                    status_code=None if is_default else code,
                    error_type=error_type,
                )
            )
        return tuple(records)

    def _lookup_response(self, spec: OperationSpec, code: str) -> Optional[ResponseNode]:
        node = spec.operation.responses[code]
        response = self._context.graph.response(node)
        if response is None:
            self._context.warn(
                f"{spec.label}: response reference {node.ref!r} for {code} cannot be resolved"
            )
        return response

    def _response_type(
        self,
        response: Optional[ResponseNode],
        hint: str,
    ) -> Optional[TypeDescriptor]:
        if response is None:
            return None
        chosen = preferred_media(response.content)
        if chosen is None:
            return None
        return self._resolver.resolve_inline(chosen[1], True, hint)


def _client_names(names: set[str]) -> dict[str, str]:
    # Renamed clients take the next free numbered variant among the tag names.
    taken = NameRegistry(names)
    renamed: dict[str, str] = {}
    for name in sorted(names):
        if f"{name}{CLIENT_CLASS_SUFFIX}" in RUNTIME_TYPE_NAMES:
            renamed[name] = taken.reserve(name)
        else:
            renamed[name] = name
    return renamed


def _default_code(responses: dict[str, ResponseNode]) -> Optional[str]:
    return next((code for code in responses if is_default_status(code)), None)


def _signature(descriptor: TypeDescriptor, arg_name: str, required: bool) -> str:
    if required:
        return f"{descriptor.type_name} {arg_name}"
    return f"{descriptor.type_name} {arg_name} = null"


def _response_mode(
    response: Optional[ResponseNode],
    descriptor: Optional[TypeDescriptor],
) -> ResponseMode:
    if response is None or not response.content:
        return ResponseMode.NONE
    chosen = preferred_media(response.content)
    content_type = chosen[0] if chosen is not None else first_content_type(response.content)
    is_text = "text/" in (content_type or "").lower()
    if descriptor is None:
        return ResponseMode.STRING if is_text else ResponseMode.JSON
    if descriptor.base_name == TEXT_TYPE:
        return ResponseMode.STRING
    if descriptor.base_name == OPAQUE_DOCUMENT:
        return ResponseMode.STRING if is_text else ResponseMode.JSON_DOCUMENT
    return ResponseMode.JSON
