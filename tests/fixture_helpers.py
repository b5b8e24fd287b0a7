"""Shared helpers for fixture-driven tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import pytest
import yaml

from openapi_to_csharp_generator.config import GeneratorConfig
from openapi_to_csharp_generator.context import GenerationContext
from openapi_to_csharp_generator.generator import AssembledSdk, assemble_sdk
from openapi_to_csharp_generator.loader import parse_openapi_document
from openapi_to_csharp_generator.schema_to_models import ModelAssembler
from openapi_to_csharp_generator.spec_graph import SpecificationGraph

_FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures" / "openapi_specs"
_P = ParamSpec("_P")
_R = TypeVar("_R")


def fixture_dir() -> Path:
    """Return the OpenAPI fixtures directory."""
    return _FIXTURE_DIR


def fixture_path(name: str) -> Path:
    return _FIXTURE_DIR / name


def iter_fixture_paths() -> list[Path]:
    """Return all YAML fixture paths sorted by name."""
    paths = sorted(_FIXTURE_DIR.glob("*.yaml")) + sorted(_FIXTURE_DIR.glob("*.yml"))
    return [path for path in paths if path.is_file()]


def parametrize_fixtures() -> Callable[[Callable[_P, _R]], Callable[_P, _R]]:
    """Parametrize a test over all fixture paths."""

    def _decorator(func: Callable[_P, _R]) -> Callable[_P, _R]:
        decorator: Callable[[Callable[_P, _R]], Callable[_P, _R]]
        decorator = pytest.mark.parametrize(
            "fixture_path",
            iter_fixture_paths(),
            ids=lambda path: path.name,
        )
        return decorator(func)

    return _decorator


def openapi_document(
    *,
    paths: dict[str, Any] | None = None,
    schemas: dict[str, Any] | None = None,
    **components: Any,
) -> dict[str, Any]:
    """Build a minimal OpenAPI 3.0 payload around the given sections."""
    payload: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1.0.0"},
        "paths": paths if paths is not None else {},
        "components": {"schemas": schemas or {}, **components},
    }
    return payload


def build_sdk(payload: dict[str, Any], *, namespace: str = "Acme.Sdk") -> AssembledSdk:
    """Assemble records for an in-memory document."""
    document = parse_openapi_document(payload)
    config = GeneratorConfig.create(output_dir="unused", namespace=namespace)
    return assemble_sdk(document, config=config)


def build_sdk_from_yaml(text: str, *, namespace: str = "Acme.Sdk") -> AssembledSdk:
    payload = yaml.safe_load(text)
    assert isinstance(payload, dict)
    return build_sdk(payload, namespace=namespace)


def classified_assembler(payload: dict[str, Any]) -> tuple[ModelAssembler, GenerationContext]:
    """Return a model assembler whose named schemas have been classified."""
    context = GenerationContext(SpecificationGraph(parse_openapi_document(payload)))
    assembler = ModelAssembler(context)
    assembler.classify()
    return assembler, context
