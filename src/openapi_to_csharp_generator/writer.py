"""Filesystem writers for generated C# sources."""

from __future__ import annotations

import os
from pathlib import Path

from .codegen import render_api_version, render_client, render_model, render_root_client
from .model_types import ApiVersionRecord, ClientRecord, ModelRecord, RootClientRecord

GENERATED_SUFFIX = ".g.cs"
MODELS_DIRNAME = "Models"
HTTP_DIRNAME = "Http"
_SKIPPED_DIRECTORIES = frozenset({"bin", "obj"})


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def prepare_output_dir(output_dir: Path) -> list[Path]:
    """Create the output directory and delete previously generated files.

    Only files ending in ``.g.cs`` are removed; ``bin`` and ``obj`` build
    directories are not descended into. Hand-written files are kept.

    Args:
        output_dir (Path): Root output directory.

    Returns:
        list[Path]: Files that were removed.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to create output directory {output_dir}: {exc}") from exc

    stale = find_generated_files(output_dir)
    for path in stale:
        try:
            path.unlink()
        except OSError as exc:
            raise WriteError(f"Failed to remove generated file {path}: {exc}") from exc
    return stale


def find_generated_files(output_dir: Path) -> list[Path]:
    """Return generated files under ``output_dir`` in a stable order."""
    found: list[Path] = []
    try:
        for current, dirnames, filenames in os.walk(output_dir, onerror=_raise_walk_error):
            dirnames[:] = sorted(name for name in dirnames if name not in _SKIPPED_DIRECTORIES)
            found.extend(
                Path(current) / name for name in sorted(filenames) if name.endswith(GENERATED_SUFFIX)
            )
    except OSError as exc:
        raise WriteError(f"Failed to scan output directory {output_dir}: {exc}") from exc
    return found


def write_models(*, output_dir: Path, models: tuple[ModelRecord, ...], namespace: str) -> list[Path]:
    """Write one ``Models/{Name}.g.cs`` file per model.

    Args:
        output_dir (Path): Root output directory.
        models (tuple[ModelRecord, ...]): Models to render.
        namespace (str): Root namespace.

    Returns:
        list[Path]: Written file paths.
    """
    models_dir = output_dir / MODELS_DIRNAME
    _ensure_dir(models_dir)
    written: list[Path] = []
    for model in models:
        path = models_dir / f"{model.name}{GENERATED_SUFFIX}"
        _write_file(path, render_model(model, namespace=namespace))
        written.append(path)
    return written


def write_clients(
    *,
    output_dir: Path,
    clients: tuple[ClientRecord, ...],
    namespace: str,
) -> list[Path]:
    """Write one ``{Name}Client.g.cs`` file per client."""
    written: list[Path] = []
    for client in clients:
        path = output_dir / f"{client.class_name}{GENERATED_SUFFIX}"
        _write_file(path, render_client(client, namespace=namespace))
        written.append(path)
    return written


def write_root_client(*, output_dir: Path, root: RootClientRecord) -> Path:
    path = output_dir / f"{root.class_name}{GENERATED_SUFFIX}"
    _write_file(path, render_root_client(root))
    return path


def write_api_version(*, output_dir: Path, version: ApiVersionRecord) -> Path:
    http_dir = output_dir / HTTP_DIRNAME
    _ensure_dir(http_dir)
    path = http_dir / f"ApiVersion{GENERATED_SUFFIX}"
    _write_file(path, render_api_version(version))
    return path


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to create directory {path}: {exc}") from exc


def _write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
