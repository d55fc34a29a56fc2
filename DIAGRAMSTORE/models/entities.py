"""Pydantic models for every persisted diagram entity.

Attributes are snake_case in Python and camelCase once serialized, which is
the shape used both for embedded documents and on the wire. Unknown keys are
kept so that newer clients do not lose data through older code.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .cardinality import Cardinality
from .timestamps import Timestamp, utc_now


class StorageModel(BaseModel):
    """Base for persisted models (camelCase aliases, extra keys kept)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> Dict[str, Any]:
        """JSON-compatible dict keyed by serialized (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)


class DataTypeRef(StorageModel):
    id: str
    name: str


class DBField(StorageModel):
    id: str
    name: str
    type: DataTypeRef
    primary_key: bool = False
    unique: bool = False
    nullable: bool = True
    created_at: Timestamp = Field(default_factory=utc_now)
    character_maximum_length: Optional[str] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default: Optional[str] = None
    collation: Optional[str] = None
    comment: Optional[str] = None


class DBIndex(StorageModel):
    id: str
    name: str
    unique: bool = False
    field_ids: List[str] = Field(default_factory=list)
    created_at: Timestamp = Field(default_factory=utc_now)


class DBTable(StorageModel):
    id: str
    diagram_id: Optional[str] = None
    name: str
    schema_name: Optional[str] = Field(default=None, alias="schema")
    x: float = 0
    y: float = 0
    fields: List[DBField] = Field(default_factory=list)
    indexes: List[DBIndex] = Field(default_factory=list)
    color: Optional[str] = None
    created_at: Timestamp = Field(default_factory=utc_now)
    width: Optional[float] = None
    comment: Optional[str] = None
    is_view: bool = False
    is_materialized_view: bool = False
    order: Optional[int] = None


class DBRelationship(StorageModel):
    id: str
    diagram_id: Optional[str] = None
    name: Optional[str] = None
    source_schema: Optional[str] = None
    source_table_id: str
    target_schema: Optional[str] = None
    target_table_id: str
    source_field_id: Optional[str] = None
    target_field_id: Optional[str] = None
    type: Optional[str] = None
    source_cardinality: Cardinality = "one"
    target_cardinality: Cardinality = "one"
    created_at: Timestamp = Field(default_factory=utc_now)


class DBDependency(StorageModel):
    id: str
    diagram_id: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    table_id: str
    dependent_schema: Optional[str] = None
    dependent_table_id: str
    created_at: Timestamp = Field(default_factory=utc_now)


class Area(StorageModel):
    id: str
    diagram_id: Optional[str] = None
    name: str
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    color: Optional[str] = None


class CustomTypeField(StorageModel):
    field: str
    type: str


class DBCustomType(StorageModel):
    id: str
    diagram_id: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    type: str
    kind: Optional[str] = None
    values: List[str] = Field(default_factory=list)
    fields: List[CustomTypeField] = Field(default_factory=list)


class DiagramFilter(StorageModel):
    """Visibility filter of one diagram.

    `None` means no filter (everything visible); an empty list means nothing
    of that kind is visible.
    """
    diagram_id: str
    table_ids: Optional[List[str]] = None
    schemas_ids: Optional[List[str]] = None


class AppConfig(StorageModel):
    """Application config singleton (always id 1)."""
    id: int = 1
    default_diagram_id: str = ""


CHILD_LIST_FIELDS = ("tables", "relationships", "dependencies", "areas", "custom_types")


class Diagram(StorageModel):
    id: str
    name: str
    database_type: str
    database_edition: Optional[str] = None
    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)

    # Attached only when requested through DiagramIncludeOptions
    tables: Optional[List[DBTable]] = None
    relationships: Optional[List[DBRelationship]] = None
    dependencies: Optional[List[DBDependency]] = None
    areas: Optional[List[Area]] = None
    custom_types: Optional[List[DBCustomType]] = None

    def record(self) -> Dict[str, Any]:
        """The diagram's own fields, without any attached child lists."""
        return self.model_dump(mode="json", by_alias=True, exclude=set(CHILD_LIST_FIELDS))

    def to_document(self) -> Dict[str, Any]:
        """Own fields plus whichever child lists are attached."""
        document = self.record()
        for name in CHILD_LIST_FIELDS:
            children = getattr(self, name)
            if children is not None:
                document[to_camel(name)] = [child.to_document() for child in children]
        return document


class DiagramIncludeOptions(BaseModel):
    """Independent flags selecting which child collections to attach."""
    include_tables: bool = False
    include_relationships: bool = False
    include_dependencies: bool = False
    include_areas: bool = False
    include_custom_types: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    @classmethod
    def everything(cls) -> "DiagramIncludeOptions":
        return cls(
            include_tables=True,
            include_relationships=True,
            include_dependencies=True,
            include_areas=True,
            include_custom_types=True,
        )

    def any(self) -> bool:
        return any(self.model_dump().values())

    def to_query_params(self) -> Dict[str, str]:
        """Only the flags that are set, as `includeX=true` query parameters."""
        return {
            alias: "true"
            for alias, enabled in self.model_dump(by_alias=True).items()
            if enabled
        }
