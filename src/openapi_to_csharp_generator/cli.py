"""Command line interface for OpenAPI to C# SDK generation."""

from __future__ import annotations

import argparse
from pathlib import Path

from .config import DEFAULT_NAMESPACE
from .generator import (
    ConfigError,
    GenerationError,
    OpenAPILoadError,
    WriteError,
    run_generation,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="openapi-to-csharp-generator",
        description="Generate a C# client SDK from an OpenAPI YAML or JSON document",
    )
    parser.add_argument("--input", required=True, help="Path to an OpenAPI YAML or JSON file")
    parser.add_argument("--output", required=True, help="Output directory for generated sources")
    parser.add_argument(
        "--namespace",
        default=DEFAULT_NAMESPACE,
        help=f"Root C# namespace of the generated code (default: {DEFAULT_NAMESPACE})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run = run_generation(
            input_path=Path(args.input),
            output_dir=args.output,
            namespace=args.namespace,
        )
    except (OpenAPILoadError, ConfigError, GenerationError, WriteError) as exc:
        parser.error(str(exc))
        return 2

    for warning in run.result.warnings:
        print(f"Warning: {warning}")
    print(f"Generated {len(run.result.files)} files in {run.result.output_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
