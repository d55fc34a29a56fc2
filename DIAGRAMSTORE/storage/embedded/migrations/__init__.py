"""Versioned schema migrations for the embedded store."""

from .types import CollectionSchema, DataTransform, DocumentTransform, MigrationStep
from .transforms import (
    coerce_field_nullable,
    derive_relationship_cardinalities,
    split_legacy_field_types,
)
from .registry import LATEST_VERSION, MIGRATIONS
from .runner import MigrationRunner

__all__ = [
    "CollectionSchema",
    "DataTransform",
    "DocumentTransform",
    "MigrationStep",
    "coerce_field_nullable",
    "derive_relationship_cardinalities",
    "split_legacy_field_types",
    "LATEST_VERSION",
    "MIGRATIONS",
    "MigrationRunner",
]
