"""Entity models for persisted diagrams."""

from .cardinality import Cardinality, RelationshipType, determine_cardinalities
from .timestamps import Timestamp, ensure_utc, to_wire_datetime, utc_now
from .entities import (
    StorageModel,
    DataTypeRef,
    DBField,
    DBIndex,
    DBTable,
    DBRelationship,
    DBDependency,
    Area,
    CustomTypeField,
    DBCustomType,
    DiagramFilter,
    AppConfig,
    Diagram,
    DiagramIncludeOptions,
)
from .patches import (
    EntityPatch,
    DiagramPatch,
    TablePatch,
    RelationshipPatch,
    DependencyPatch,
    AreaPatch,
    CustomTypePatch,
    ConfigPatch,
)

__all__ = [
    "Cardinality",
    "RelationshipType",
    "determine_cardinalities",
    "Timestamp",
    "ensure_utc",
    "to_wire_datetime",
    "utc_now",
    "StorageModel",
    "DataTypeRef",
    "DBField",
    "DBIndex",
    "DBTable",
    "DBRelationship",
    "DBDependency",
    "Area",
    "CustomTypeField",
    "DBCustomType",
    "DiagramFilter",
    "AppConfig",
    "Diagram",
    "DiagramIncludeOptions",
    "EntityPatch",
    "DiagramPatch",
    "TablePatch",
    "RelationshipPatch",
    "DependencyPatch",
    "AreaPatch",
    "CustomTypePatch",
    "ConfigPatch",
]
