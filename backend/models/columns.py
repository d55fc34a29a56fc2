"""Fixed attribute-to-column mapping for every relational table.

Exposed (camelCase) attribute names never reach SQL directly: each one is
looked up here, so an unknown attribute is rejected instead of being
interpolated into a statement.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter

from DIAGRAMSTORE.models import Timestamp, to_wire_datetime
from DIAGRAMSTORE.utils.error_handling import ValidationError

_TIMESTAMP = TypeAdapter(Timestamp)

_SQL_TYPES = {
    "text": "TEXT",
    "real": "REAL",
    "int": "INTEGER",
    "bool": "INTEGER",
    "json": "TEXT",
    "timestamp": "TEXT",
}


@dataclass(frozen=True)
class Column:
    attribute: str
    name: str
    kind: str = "text"

    @property
    def sql(self) -> str:
        return f'"{self.name}"'

    @property
    def sql_type(self) -> str:
        return _SQL_TYPES[self.kind]

    def to_sql(self, value: Any) -> Any:
        if self.kind == "json":
            # A JSON null stays distinguishable from an empty list
            return json.dumps(value)
        if value is None:
            return None
        if self.kind == "bool":
            return int(bool(value))
        if self.kind == "timestamp":
            return to_wire_datetime(_TIMESTAMP.validate_python(value))
        return value

    def from_sql(self, value: Any) -> Any:
        if self.kind == "json":
            return json.loads(value) if value is not None else None
        if value is None:
            return None
        if self.kind == "bool":
            return bool(value)
        return value


def _columns(*specs: Tuple[str, ...]) -> Tuple[Column, ...]:
    return tuple(Column(*spec) for spec in specs)


@dataclass(frozen=True)
class TableMapping:
    table: str
    columns: Tuple[Column, ...]
    key: str = "id"
    parent: Optional[str] = "diagramId"
    order_by: Tuple[str, ...] = ()

    @property
    def sql(self) -> str:
        return f'"{self.table}"'

    def column(self, attribute: str) -> Column:
        for column in self.columns:
            if column.attribute == attribute:
                return column
        raise ValidationError(f"Unknown attribute: {attribute}")

    @property
    def attributes(self) -> List[str]:
        return [column.attribute for column in self.columns]

    @property
    def select_list(self) -> str:
        return ", ".join(column.sql for column in self.columns)

    @property
    def order_clause(self) -> str:
        terms = [f"COALESCE({self.column(attr).sql}, '')" for attr in self.order_by]
        return " ORDER BY " + ", ".join(terms + ["rowid"])

    def to_row(self, document: Dict[str, Any]) -> List[Any]:
        """Column values, in column order, for an insert."""
        return [column.to_sql(document.get(column.attribute)) for column in self.columns]

    def to_document(self, row: Any) -> Dict[str, Any]:
        return {column.attribute: column.from_sql(row[column.name]) for column in self.columns}

    def ddl(self) -> List[str]:
        definitions = [
            f"{column.sql} {column.sql_type}" + (" PRIMARY KEY" if column.attribute == self.key else "")
            for column in self.columns
        ]
        statements = [f"CREATE TABLE IF NOT EXISTS {self.sql} ({', '.join(definitions)})"]
        if self.parent is not None and self.parent != self.key:
            parent = self.column(self.parent)
            statements.append(
                f'CREATE INDEX IF NOT EXISTS "idx_{self.table}_{parent.name}" ON {self.sql} ({parent.sql})'
            )
        return statements


DIAGRAMS = TableMapping(
    table="diagrams",
    parent=None,
    columns=_columns(
        ("id", "id"),
        ("name", "name"),
        ("databaseType", "database_type"),
        ("databaseEdition", "database_edition"),
        ("createdAt", "created_at", "timestamp"),
        ("updatedAt", "updated_at", "timestamp"),
    ),
)

DB_TABLES = TableMapping(
    table="db_tables",
    columns=_columns(
        ("id", "id"),
        ("diagramId", "diagram_id"),
        ("name", "name"),
        ("schema", "schema"),
        ("x", "x", "real"),
        ("y", "y", "real"),
        ("fields", "fields", "json"),
        ("indexes", "indexes", "json"),
        ("color", "color"),
        ("createdAt", "created_at", "timestamp"),
        ("width", "width", "real"),
        ("comment", "comment"),
        ("isView", "is_view", "bool"),
        ("isMaterializedView", "is_materialized_view", "bool"),
        ("order", "order", "int"),
    ),
)

DB_RELATIONSHIPS = TableMapping(
    table="db_relationships",
    order_by=("name",),
    columns=_columns(
        ("id", "id"),
        ("diagramId", "diagram_id"),
        ("name", "name"),
        ("sourceSchema", "source_schema"),
        ("sourceTableId", "source_table_id"),
        ("targetSchema", "target_schema"),
        ("targetTableId", "target_table_id"),
        ("sourceFieldId", "source_field_id"),
        ("targetFieldId", "target_field_id"),
        ("type", "type"),
        ("sourceCardinality", "source_cardinality"),
        ("targetCardinality", "target_cardinality"),
        ("createdAt", "created_at", "timestamp"),
    ),
)

DB_DEPENDENCIES = TableMapping(
    table="db_dependencies",
    columns=_columns(
        ("id", "id"),
        ("diagramId", "diagram_id"),
        ("schema", "schema"),
        ("tableId", "table_id"),
        ("dependentSchema", "dependent_schema"),
        ("dependentTableId", "dependent_table_id"),
        ("createdAt", "created_at", "timestamp"),
    ),
)

AREAS = TableMapping(
    table="areas",
    columns=_columns(
        ("id", "id"),
        ("diagramId", "diagram_id"),
        ("name", "name"),
        ("x", "x", "real"),
        ("y", "y", "real"),
        ("width", "width", "real"),
        ("height", "height", "real"),
        ("color", "color"),
    ),
)

DB_CUSTOM_TYPES = TableMapping(
    table="db_custom_types",
    order_by=("type",),
    columns=_columns(
        ("id", "id"),
        ("diagramId", "diagram_id"),
        ("schema", "schema"),
        ("type", "type"),
        ("kind", "kind"),
        ("values", "values", "json"),
        ("fields", "fields", "json"),
    ),
)

DIAGRAM_FILTERS = TableMapping(
    table="diagram_filters",
    key="diagramId",
    columns=_columns(
        ("diagramId", "diagram_id"),
        ("tableIds", "table_ids", "json"),
        ("schemasIds", "schemas_ids", "json"),
    ),
)

CONFIG = TableMapping(
    table="config",
    parent=None,
    columns=_columns(
        ("id", "id", "int"),
        ("defaultDiagramId", "default_diagram_id"),
    ),
)

# Keyed by the resource segment used in URLs
CHILD_MAPPINGS: Dict[str, TableMapping] = {
    "tables": DB_TABLES,
    "relationships": DB_RELATIONSHIPS,
    "dependencies": DB_DEPENDENCIES,
    "areas": AREAS,
    "custom-types": DB_CUSTOM_TYPES,
}

ALL_MAPPINGS: Tuple[TableMapping, ...] = (
    DIAGRAMS,
    DB_TABLES,
    DB_RELATIONSHIPS,
    DB_DEPENDENCIES,
    AREAS,
    DB_CUSTOM_TYPES,
    DIAGRAM_FILTERS,
    CONFIG,
)
