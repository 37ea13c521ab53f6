"""Adapter registry — maps source kinds to adapter classes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trendfinder.ingestion.source import SourceKind

if TYPE_CHECKING:
    from trendfinder.ingestion.adapter import SourceAdapter

_REGISTRY: dict[SourceKind, type[SourceAdapter]] = {}


def register_adapter(kind: SourceKind, cls: type[SourceAdapter]) -> None:
    """Register an adapter class for a given source kind."""
    _REGISTRY[kind] = cls


def get_adapter_class(kind: SourceKind) -> type[SourceAdapter] | None:
    """Look up an adapter class by source kind. Returns None if not found."""
    return _REGISTRY.get(kind)


def missing_kinds() -> list[SourceKind]:
    """Return the source kinds that have no registered adapter."""
    return [kind for kind in SourceKind if kind not in _REGISTRY]
