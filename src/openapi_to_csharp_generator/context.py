"""Per-run state shared by the resolver and the assemblers."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Optional

from .model_types import RUNTIME_TYPE_NAMES, SchemaTypeInfo
from .naming import NameRegistry
from .spec_graph import SchemaNode, SpecificationGraph, component_name


@dataclass(frozen=True)
class PendingInlineModel:
    """An inline object schema waiting to be built into a model."""

    name: str
    schema: SchemaNode


class GenerationContext:
    """Registries and work-lists for one generation run.

    Nothing here is global; a fresh context is created for each run so two
    runs over the same document produce identical output.
    """

    def __init__(self, graph: SpecificationGraph) -> None:
        self.graph = graph
        self.schema_types: dict[str, SchemaTypeInfo] = {}
        self.model_names = NameRegistry(RUNTIME_TYPE_NAMES)
        self.pending_inline: deque[PendingInlineModel] = deque()
        self.error_models: set[str] = set()
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def schema_info(self, ref: str) -> Optional[SchemaTypeInfo]:
        return self.schema_types.get(component_name(ref))
