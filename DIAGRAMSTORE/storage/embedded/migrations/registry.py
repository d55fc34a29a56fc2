"""Migration registry - single source of truth for the embedded store's shape.

Steps are applied in list order. A step's schema version is its 1-based
position in `MIGRATIONS`; new steps are only ever appended.
"""

from typing import List, Tuple

from .transforms import (
    coerce_field_nullable,
    derive_relationship_cardinalities,
    split_legacy_field_types,
)
from .types import CollectionSchema, DataTransform, MigrationStep


def _collection(name: str, indexes: str, key_path: str = "id") -> CollectionSchema:
    return CollectionSchema(name=name, key_path=key_path, indexes=tuple(indexes.split()))


# ============================================================================
# Collection shapes, in the order they appeared
# ============================================================================

_DIAGRAMS_V1 = _collection("diagrams", "name databaseType createdAt updatedAt")
_DIAGRAMS_V3 = _collection("diagrams", "name databaseType databaseEdition createdAt updatedAt")

_TABLES_V1 = _collection("db_tables", "diagramId name x y color createdAt width")
_TABLES_V4 = _collection("db_tables", "diagramId name x y color createdAt width comment")
_TABLES_V5 = _collection("db_tables", "diagramId name schema x y color createdAt width comment")
_TABLES_V8 = _collection(
    "db_tables",
    "diagramId name schema x y color createdAt width comment isView isMaterializedView order",
)

_RELATIONSHIPS_V1 = _collection(
    "db_relationships",
    "diagramId name sourceTableId targetTableId sourceFieldId targetFieldId type createdAt",
)
_RELATIONSHIPS_V5 = _collection(
    "db_relationships",
    "diagramId name sourceSchema sourceTableId targetSchema targetTableId "
    "sourceFieldId targetFieldId type createdAt",
)

_DEPENDENCIES = _collection(
    "db_dependencies",
    "diagramId schema tableId dependentSchema dependentTableId createdAt",
)
_AREAS = _collection("areas", "diagramId name x y width height color")
_CUSTOM_TYPES = _collection("db_custom_types", "diagramId schema type kind")
_CONFIG = _collection("config", "defaultDiagramId")
_DIAGRAM_FILTERS = _collection("diagram_filters", "", key_path="diagramId")


def _shape(*collections: CollectionSchema) -> Tuple[CollectionSchema, ...]:
    return tuple(collections)


_SHAPE_V1 = _shape(_DIAGRAMS_V1, _TABLES_V1, _RELATIONSHIPS_V1, _CONFIG)
_SHAPE_V3 = _shape(_DIAGRAMS_V3, _TABLES_V1, _RELATIONSHIPS_V1, _CONFIG)
_SHAPE_V4 = _shape(_DIAGRAMS_V3, _TABLES_V4, _RELATIONSHIPS_V1, _CONFIG)
_SHAPE_V5 = _shape(_DIAGRAMS_V3, _TABLES_V5, _RELATIONSHIPS_V5, _CONFIG)
_SHAPE_V7 = _SHAPE_V5 + (_DEPENDENCIES,)
_SHAPE_V8 = _shape(_DIAGRAMS_V3, _TABLES_V8, _RELATIONSHIPS_V5, _CONFIG, _DEPENDENCIES)
_SHAPE_V10 = _SHAPE_V8 + (_AREAS,)
_SHAPE_V11 = _SHAPE_V10 + (_CUSTOM_TYPES,)
_SHAPE_V12 = _SHAPE_V11 + (_DIAGRAM_FILTERS,)


# ============================================================================
# Registry
# ============================================================================

MIGRATIONS: List[MigrationStep] = [
    MigrationStep(
        description="Initial collections: diagrams, tables, relationships, config",
        collections=_SHAPE_V1,
    ),
    MigrationStep(
        description="Split legacy string field types into {id, name}",
        transforms=(DataTransform("db_tables", split_legacy_field_types),),
    ),
    MigrationStep(
        description="Index diagram database edition",
        collections=_SHAPE_V3,
    ),
    MigrationStep(
        description="Index table comments",
        collections=_SHAPE_V4,
    ),
    MigrationStep(
        description="Index table and relationship schemas",
        collections=_SHAPE_V5,
    ),
    MigrationStep(
        description="Derive relationship cardinalities from legacy type",
        transforms=(DataTransform("db_relationships", derive_relationship_cardinalities),),
    ),
    MigrationStep(
        description="Add dependencies collection",
        collections=_SHAPE_V7,
    ),
    MigrationStep(
        description="Index table view flags and order",
        collections=_SHAPE_V8,
    ),
    MigrationStep(
        description="Coerce stringified field nullability to booleans",
        transforms=(DataTransform("db_tables", coerce_field_nullable),),
    ),
    MigrationStep(
        description="Add areas collection",
        collections=_SHAPE_V10,
    ),
    MigrationStep(
        description="Add custom types collection",
        collections=_SHAPE_V11,
    ),
    MigrationStep(
        description="Add diagram filters collection and reset config",
        collections=_SHAPE_V12,
        clears=("config",),
    ),
]

LATEST_VERSION = len(MIGRATIONS)
