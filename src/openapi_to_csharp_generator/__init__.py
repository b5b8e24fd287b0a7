"""OpenAPI to C# SDK generator package."""

from __future__ import annotations

from .cli import main
from .generator import GenerationRun, assemble_sdk, run_generation

__all__ = ["GenerationRun", "assemble_sdk", "main", "run_generation"]
