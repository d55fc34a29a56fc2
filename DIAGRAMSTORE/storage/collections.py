"""Descriptors for every entity kind the storage contract handles.

Both adapters and the record service drive their generic CRUD code from these
descriptors, which keeps validation messages, sort orders and wire names
identical everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from DIAGRAMSTORE.models import (
    Area,
    AreaPatch,
    CustomTypePatch,
    DBCustomType,
    DBDependency,
    DBRelationship,
    DBTable,
    DependencyPatch,
    Diagram,
    DiagramPatch,
    EntityPatch,
    RelationshipPatch,
    StorageModel,
    TablePatch,
)


def describe_fields(names: Tuple[str, ...]) -> str:
    """Human list of field names: "a or b", "a, b, or c"."""
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} or {names[1]}"
    return ", ".join(names[:-1]) + f", or {names[-1]}"


@dataclass(frozen=True)
class EntityKind:
    label: str
    model: Type[StorageModel]
    patch_model: Type[EntityPatch]
    body_key: str
    required: Tuple[str, ...]

    @property
    def missing_message(self) -> str:
        return f"Missing required fields: {describe_fields(self.required)}"


@dataclass(frozen=True)
class ChildCollection(EntityKind):
    attribute: str
    store_name: str
    resource: str
    sort_attribute: Optional[str] = None

    def sort_documents(self, documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Sort by the collection's name attribute; ties keep insertion order."""
        if self.sort_attribute is None:
            return documents
        return sorted(documents, key=lambda doc: doc.get(self.sort_attribute) or "")


DIAGRAMS = EntityKind(
    label="diagram",
    model=Diagram,
    patch_model=DiagramPatch,
    body_key="diagram",
    required=("id", "name", "databaseType"),
)

TABLES = ChildCollection(
    label="table",
    model=DBTable,
    patch_model=TablePatch,
    body_key="table",
    required=("id", "name"),
    attribute="tables",
    store_name="db_tables",
    resource="tables",
)

RELATIONSHIPS = ChildCollection(
    label="relationship",
    model=DBRelationship,
    patch_model=RelationshipPatch,
    body_key="relationship",
    required=("id", "sourceTableId", "targetTableId"),
    attribute="relationships",
    store_name="db_relationships",
    resource="relationships",
    sort_attribute="name",
)

DEPENDENCIES = ChildCollection(
    label="dependency",
    model=DBDependency,
    patch_model=DependencyPatch,
    body_key="dependency",
    required=("id", "tableId", "dependentTableId"),
    attribute="dependencies",
    store_name="db_dependencies",
    resource="dependencies",
)

AREAS = ChildCollection(
    label="area",
    model=Area,
    patch_model=AreaPatch,
    body_key="area",
    required=("id", "name"),
    attribute="areas",
    store_name="areas",
    resource="areas",
)

# Custom types have no name of their own; the type name plays that role
CUSTOM_TYPES = ChildCollection(
    label="custom type",
    model=DBCustomType,
    patch_model=CustomTypePatch,
    body_key="customType",
    required=("id", "type"),
    attribute="custom_types",
    store_name="db_custom_types",
    resource="custom-types",
    sort_attribute="type",
)

CHILD_COLLECTIONS: Tuple[ChildCollection, ...] = (
    TABLES,
    RELATIONSHIPS,
    DEPENDENCIES,
    AREAS,
    CUSTOM_TYPES,
)

DIAGRAMS_STORE = "diagrams"
DIAGRAM_FILTERS_STORE = "diagram_filters"
CONFIG_STORE = "config"
CONFIG_ID = 1
