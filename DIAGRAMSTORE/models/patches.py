"""Typed partial-update structures, one per entity.

Every attribute is optional. Only the attributes that were actually supplied
end up in `to_attributes()`, so an explicit `None` (clear the value) stays
distinguishable from "not supplied" (leave untouched). Attributes listed in a
patch's `non_nullable` may be supplied but never cleared.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .cardinality import Cardinality
from .entities import CustomTypeField, DBField, DBIndex
from .timestamps import Timestamp


class EntityPatch(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_cleared_required(self) -> "EntityPatch":
        fields = type(self).model_fields
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{fields[name].alias or name} cannot be null")
        return self

    def to_attributes(self) -> Dict[str, Any]:
        """Supplied attributes only, keyed by serialized (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class DiagramPatch(EntityPatch):
    non_nullable = ("id", "name", "database_type", "created_at", "updated_at")

    id: Optional[str] = None
    name: Optional[str] = None
    database_type: Optional[str] = None
    database_edition: Optional[str] = None
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class TablePatch(EntityPatch):
    non_nullable = (
        "id", "diagram_id", "name", "x", "y", "fields", "indexes",
        "created_at", "is_view", "is_materialized_view",
    )

    id: Optional[str] = None
    diagram_id: Optional[str] = None
    name: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    x: Optional[float] = None
    y: Optional[float] = None
    fields: Optional[List[DBField]] = None
    indexes: Optional[List[DBIndex]] = None
    color: Optional[str] = None
    created_at: Optional[Timestamp] = None
    width: Optional[float] = None
    comment: Optional[str] = None
    is_view: Optional[bool] = None
    is_materialized_view: Optional[bool] = None
    order: Optional[int] = None


class RelationshipPatch(EntityPatch):
    non_nullable = (
        "id", "diagram_id", "source_table_id", "target_table_id",
        "source_cardinality", "target_cardinality", "created_at",
    )

    id: Optional[str] = None
    diagram_id: Optional[str] = None
    name: Optional[str] = None
    source_schema: Optional[str] = None
    source_table_id: Optional[str] = None
    target_schema: Optional[str] = None
    target_table_id: Optional[str] = None
    source_field_id: Optional[str] = None
    target_field_id: Optional[str] = None
    type: Optional[str] = None
    source_cardinality: Optional[Cardinality] = None
    target_cardinality: Optional[Cardinality] = None
    created_at: Optional[Timestamp] = None


class DependencyPatch(EntityPatch):
    non_nullable = ("id", "diagram_id", "table_id", "dependent_table_id", "created_at")

    id: Optional[str] = None
    diagram_id: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    table_id: Optional[str] = None
    dependent_schema: Optional[str] = None
    dependent_table_id: Optional[str] = None
    created_at: Optional[Timestamp] = None


class AreaPatch(EntityPatch):
    non_nullable = ("id", "diagram_id", "name", "x", "y", "width", "height")

    id: Optional[str] = None
    diagram_id: Optional[str] = None
    name: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None


class CustomTypePatch(EntityPatch):
    non_nullable = ("id", "diagram_id", "type", "values", "fields")

    id: Optional[str] = None
    diagram_id: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    type: Optional[str] = None
    kind: Optional[str] = None
    values: Optional[List[str]] = None
    fields: Optional[List[CustomTypeField]] = None


class ConfigPatch(EntityPatch):
    non_nullable = ("default_diagram_id",)

    default_diagram_id: Optional[str] = None
