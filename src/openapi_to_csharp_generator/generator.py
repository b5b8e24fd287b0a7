"""High-level generator orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .clients import ClientAssembler, GenerationError
from .config import DEFAULT_NAMESPACE, ConfigError, GeneratorConfig
from .context import GenerationContext
from .loader import OpenAPILoadError, load_openapi_document
from .model_types import (
    RUNTIME_TYPE_NAMES,
    ApiVersionRecord,
    ClientRecord,
    GenerationResult,
    ModelRecord,
    RootClientRecord,
)
from .naming import NameRegistry
from .schema_to_models import ModelAssembler
from .spec_graph import SpecDocument, SpecificationGraph
from .writer import (
    WriteError,
    prepare_output_dir,
    write_api_version,
    write_clients,
    write_models,
    write_root_client,
)


@dataclass(frozen=True)
class AssembledSdk:
    """Everything needed to emit one SDK, before any file is written."""

    models: tuple[ModelRecord, ...]
    clients: tuple[ClientRecord, ...]
    root: RootClientRecord
    api_version: ApiVersionRecord
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class GenerationRun:
    """Generation result together with the assembled records."""

    result: GenerationResult
    sdk: AssembledSdk


def assemble_sdk(document: SpecDocument, *, config: GeneratorConfig) -> AssembledSdk:
    """Build model, client and root records for a loaded document.

    Args:
        document (SpecDocument): Typed OpenAPI document.
        config (GeneratorConfig): Validated run options.

    Returns:
        AssembledSdk: Records ready for rendering.
    """
    graph = SpecificationGraph(document)
    context = GenerationContext(graph)

    models = ModelAssembler(context)
    models.classify()
    models.build_models()
    clients = ClientAssembler(context, models.resolver).build_clients()
    # Parameter, body and response schemas may have queued more inline models.
    models.drain_inline_models()

    client_classes = NameRegistry(
        [*RUNTIME_TYPE_NAMES, *(client.class_name for client in clients)]
    )
    root = RootClientRecord(
        namespace=config.namespace,
        class_name=client_classes.reserve(config.root_client_name),
        clients=clients,
    )
    return AssembledSdk(
        models=models.finalize(),
        clients=clients,
        root=root,
        api_version=ApiVersionRecord(namespace=config.namespace, api_version=graph.api_version),
        warnings=tuple(context.warnings),
    )


def write_sdk(*, sdk: AssembledSdk, config: GeneratorConfig) -> list[Path]:
    """Clean the output directory and write every generated file."""
    prepare_output_dir(config.output_dir)
    written = write_models(
        output_dir=config.output_dir,
        models=sdk.models,
        namespace=config.namespace,
    )
    written.extend(
        write_clients(
            output_dir=config.output_dir,
            clients=sdk.clients,
            namespace=config.namespace,
        )
    )
    written.append(write_root_client(output_dir=config.output_dir, root=sdk.root))
    written.append(write_api_version(output_dir=config.output_dir, version=sdk.api_version))
    return written


def run_generation(
    *,
    input_path: Path,
    output_dir: Optional[Union[str, Path]],
    namespace: Optional[str] = DEFAULT_NAMESPACE,
) -> GenerationRun:
    """Generate a C# SDK from an OpenAPI document.

    Args:
        input_path (Path): Path to the input OpenAPI document.
        output_dir (Optional[Union[str, Path]]): Directory where generated files are written.
        namespace (Optional[str]): Root C# namespace of the generated code.

    Returns:
        GenerationRun: Generation metadata and the assembled records.
    """
    config = GeneratorConfig.create(output_dir=output_dir, namespace=namespace)
    document = load_openapi_document(input_path)
    sdk = assemble_sdk(document, config=config)
    written = write_sdk(sdk=sdk, config=config)

    result = GenerationResult(
        output_dir=str(config.output_dir),
        files=tuple(path.relative_to(config.output_dir).as_posix() for path in written),
        warnings=sdk.warnings,
    )
    return GenerationRun(result=result, sdk=sdk)


__all__ = [
    "AssembledSdk",
    "ConfigError",
    "GenerationError",
    "GenerationRun",
    "OpenAPILoadError",
    "WriteError",
    "assemble_sdk",
    "run_generation",
    "write_sdk",
]
