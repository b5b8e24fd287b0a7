"""Fixture-based OpenAPI loading tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import pytest
import yaml

from openapi_to_csharp_generator.loader import (
    OpenAPILoadError,
    get_openapi_version,
    load_openapi_document,
)
from openapi_to_csharp_generator.spec_graph import SpecificationGraph

from .fixture_helpers import fixture_dir, parametrize_fixtures


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        pytest.fail(f"Failed to parse YAML in {path}: {exc}")
    except OSError as exc:
        pytest.fail(f"Failed to read fixture {path}: {exc}")

    if not isinstance(data, dict):
        pytest.fail(f"Fixture {path} must parse to a mapping, got {type(data)!r}")

    return cast(dict[str, Any], data)


def test_fixture_directory_exists() -> None:
    """Ensure the fixtures directory is present."""
    assert fixture_dir().is_dir(), f"Fixture directory not found: {fixture_dir()}"


@parametrize_fixtures()
def test_fixture_declares_openapi_3(fixture_path: Path) -> None:
    """Every fixture targets a supported OpenAPI major version."""
    version = get_openapi_version(_load_yaml(fixture_path))
    assert version.startswith("3.")


@parametrize_fixtures()
def test_fixture_loads_into_spec_graph(fixture_path: Path) -> None:
    """Load each fixture and walk its operations."""
    try:
        document = load_openapi_document(fixture_path)
    except OpenAPILoadError as exc:
        pytest.fail(f"Loading failed for {fixture_path}:\n{exc}")
    operations = list(SpecificationGraph(document).iter_operations())
    assert operations, f"{fixture_path.name} declares no operations"
