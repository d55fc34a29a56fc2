"""Type definitions for the migration registry."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple


Document = Dict[str, Any]

# Returns the rewritten document, or None when the document is already in
# the current shape and must be left alone.
DocumentTransform = Callable[[Document], Optional[Document]]


@dataclass(frozen=True)
class CollectionSchema:
    """Declared shape of one collection: key path plus indexed attributes."""
    name: str
    key_path: str = "id"
    indexes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DataTransform:
    """Rewrite every document of `collection` that is still in a legacy shape."""
    collection: str
    transform: DocumentTransform


@dataclass(frozen=True)
class MigrationStep:
    """One schema version's worth of change.

    `collections`, when given, is the complete shape of the store at this
    version. Transforms run after the shape is applied, clears run last.
    """
    description: str
    collections: Optional[Tuple[CollectionSchema, ...]] = None
    transforms: Tuple[DataTransform, ...] = ()
    clears: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.collections is None and not self.transforms and not self.clears:
            raise ValueError(f"Migration '{self.description}' does nothing")

    @property
    def kind(self) -> str:
        parts = []
        if self.collections is not None:
            parts.append("shape")
        if self.transforms or self.clears:
            parts.append("data")
        return "+".join(parts)
