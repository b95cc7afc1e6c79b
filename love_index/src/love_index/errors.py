from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Mapping

from love_index.io.schema import REQUIRED_ROLES

DiagnosticKind = Literal["resource_load", "schema_detection", "insufficient_data"]


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    resource_path: str | None = None
    headers: tuple[str, ...] = ()
    columns: Mapping[str, str | None] = field(default_factory=dict)
    stage_counts: Mapping[str, int] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))
        if self.stage_counts is not None:
            object.__setattr__(self, "stage_counts", MappingProxyType(dict(self.stage_counts)))

    @property
    def resolved_roles(self) -> list[str]:
        return [role for role, column in self.columns.items() if column is not None]

    @property
    def unresolved_roles(self) -> list[str]:
        return [role for role, column in self.columns.items() if column is None]

    @property
    def missing_required(self) -> list[str]:
        """Required roles that were looked up and not found; empty when columns is unset."""
        return [
            role.value
            for role in REQUIRED_ROLES
            if role.value in self.columns and self.columns[role.value] is None
        ]


class PipelineError(ValueError):
    """Terminal pipeline failure carrying a caller-renderable diagnostic."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic


class ResourceLoadError(PipelineError):
    pass


class SchemaDetectionError(PipelineError):
    pass


class InsufficientDataError(PipelineError):
    pass
