"""Generator run configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .naming import CSHARP_RESERVED_KEYWORDS, pascal_identifier

DEFAULT_NAMESPACE = "GeneratedSdk"
_NAMESPACE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class ConfigError(RuntimeError):
    """Raised when generator options are missing or invalid."""


@dataclass(frozen=True)
class GeneratorConfig:
    """Validated options for one generation run."""

    output_dir: Path
    namespace: str = DEFAULT_NAMESPACE

    @classmethod
    def create(
        cls,
        *,
        output_dir: Optional[Union[str, Path]],
        namespace: Optional[str] = None,
    ) -> GeneratorConfig:
        """Validate raw options and build a config.

        Args:
            output_dir (Optional[Union[str, Path]]): Directory receiving generated files.
            namespace (Optional[str]): Root C# namespace; blank means the default.

        Returns:
            GeneratorConfig: Validated configuration.
        """
        if output_dir is None or not str(output_dir).strip():
            raise ConfigError("An output directory is required")
        resolved_namespace = (namespace or "").strip() or DEFAULT_NAMESPACE
        if not _NAMESPACE_RE.match(resolved_namespace):
            raise ConfigError(f"Invalid C# namespace: {resolved_namespace!r}")
        reserved = [
            segment
            for segment in resolved_namespace.split(".")
            if segment in CSHARP_RESERVED_KEYWORDS
        ]
        if reserved:
            raise ConfigError(f"Namespace segment {reserved[0]!r} is a reserved C# keyword")
        return cls(output_dir=Path(output_dir), namespace=resolved_namespace)

    @property
    def root_client_name(self) -> str:
        last_segment = self.namespace.rsplit(".", maxsplit=1)[-1]
        return f"{pascal_identifier(last_segment)}Client"
