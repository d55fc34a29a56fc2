"""Diagram records, including rename and delete cascades."""

import logging
from typing import Any, Dict, List, Optional

from pydantic.alias_generators import to_camel

from backend.models.columns import CHILD_MAPPINGS, DIAGRAMS
from backend.services import records
from backend.utils.database import RecordDatabase
from DIAGRAMSTORE.models import DiagramIncludeOptions, utc_now
from DIAGRAMSTORE.storage.collections import CHILD_COLLECTIONS, DIAGRAMS as DIAGRAM_KIND
from DIAGRAMSTORE.storage.validation import coerce_entity, coerce_patch
from DIAGRAMSTORE.utils.error_handling import (
    CascadeFailure,
    ErrorContext,
    log_error_with_context,
)

logger = logging.getLogger(__name__)

# Executed in order inside one transaction; any failure rolls back all of them
CASCADE_DELETE_STATEMENTS = [
    ("diagrams", 'DELETE FROM "diagrams" WHERE "id" = ?'),
    ("db_tables", 'DELETE FROM "db_tables" WHERE "diagram_id" = ?'),
    ("db_relationships", 'DELETE FROM "db_relationships" WHERE "diagram_id" = ?'),
    ("db_dependencies", 'DELETE FROM "db_dependencies" WHERE "diagram_id" = ?'),
    ("areas", 'DELETE FROM "areas" WHERE "diagram_id" = ?'),
    ("db_custom_types", 'DELETE FROM "db_custom_types" WHERE "diagram_id" = ?'),
    ("diagram_filters", 'DELETE FROM "diagram_filters" WHERE "diagram_id" = ?'),
]

# Each committed on its own; a failure leaves the others applied
CASCADE_RENAME_STATEMENTS = [
    ("db_tables", 'UPDATE "db_tables" SET "diagram_id" = ? WHERE "diagram_id" = ?'),
    ("db_relationships", 'UPDATE "db_relationships" SET "diagram_id" = ? WHERE "diagram_id" = ?'),
    ("db_dependencies", 'UPDATE "db_dependencies" SET "diagram_id" = ? WHERE "diagram_id" = ?'),
    ("areas", 'UPDATE "areas" SET "diagram_id" = ? WHERE "diagram_id" = ?'),
    ("db_custom_types", 'UPDATE "db_custom_types" SET "diagram_id" = ? WHERE "diagram_id" = ?'),
    ("diagram_filters", 'UPDATE "diagram_filters" SET "diagram_id" = ? WHERE "diagram_id" = ?'),
]


class DiagramService:
    """Diagram CRUD over the relational store."""

    def __init__(self, database: RecordDatabase):
        self.database = database

    def create(self, payload: Any) -> None:
        """Insert a diagram and any child lists attached to it, atomically."""
        diagram = coerce_entity(DIAGRAM_KIND, payload)
        with self.database.transaction() as conn:
            records.insert(conn, DIAGRAMS, diagram.record())
            for collection in CHILD_COLLECTIONS:
                mapping = CHILD_MAPPINGS[collection.resource]
                for child in getattr(diagram, collection.attribute) or []:
                    document = child.to_document()
                    document["diagramId"] = diagram.id
                    records.insert(conn, mapping, document)
        logger.info(f"Created diagram {diagram.id!r}")

    def _attach(self, conn, document: Dict[str, Any], options: DiagramIncludeOptions) -> Dict[str, Any]:
        for collection in CHILD_COLLECTIONS:
            if getattr(options, f"include_{collection.attribute}"):
                document[to_camel(collection.attribute)] = records.fetch_children(
                    conn, CHILD_MAPPINGS[collection.resource], document["id"]
                )
        return document

    def list(self, options: DiagramIncludeOptions) -> List[Dict[str, Any]]:
        with self.database.transaction() as conn:
            return [self._attach(conn, doc, options) for doc in records.fetch_all(conn, DIAGRAMS)]

    def get(self, diagram_id: str, options: DiagramIncludeOptions) -> Optional[Dict[str, Any]]:
        with self.database.transaction() as conn:
            document = records.fetch_one(conn, DIAGRAMS, diagram_id)
            if document is None:
                return None
            return self._attach(conn, document, options)

    def update(self, diagram_id: str, payload: Any) -> None:
        """Apply a partial update; `updatedAt` is always stamped with the current time.

        A new `id` is propagated to every child table afterwards. That
        propagation is not atomic: each statement commits on its own and
        failures are reported together as a CascadeFailure.
        """
        attributes = coerce_patch(DIAGRAM_KIND.patch_model, payload).to_attributes()
        if not attributes:
            return
        attributes["updatedAt"] = utc_now()

        with self.database.transaction() as conn:
            updated = records.update(conn, DIAGRAMS, diagram_id, attributes)

        new_id = attributes.get("id")
        if not updated or new_id is None or new_id == diagram_id:
            return

        logger.info(f"Renaming diagram {diagram_id!r} to {new_id!r}")
        failures: Dict[str, BaseException] = {}
        for table, statement in CASCADE_RENAME_STATEMENTS:
            try:
                with self.database.transaction() as conn:
                    conn.execute(statement, (new_id, diagram_id))
            except Exception as e:
                failures[table] = e
                log_error_with_context(
                    e, ErrorContext(operation="cascade rename", collection=table, diagram_id=diagram_id)
                )
        if failures:
            raise CascadeFailure("rename", diagram_id, failures) from next(iter(failures.values()))

    def delete(self, diagram_id: str) -> None:
        """Delete the diagram and everything it owns in one transaction."""
        with self.database.transaction() as conn:
            for _, statement in CASCADE_DELETE_STATEMENTS:
                conn.execute(statement, (diagram_id,))
        logger.info(f"Deleted diagram {diagram_id!r}")
