"""CRUD for the five child collections of a diagram."""

import logging
from typing import Any, Dict, List, Optional

from backend.models.columns import CHILD_MAPPINGS
from backend.services import records
from backend.utils.database import RecordDatabase
from DIAGRAMSTORE.storage.collections import ChildCollection
from DIAGRAMSTORE.storage.validation import coerce_entity, coerce_patch

logger = logging.getLogger(__name__)


class CollectionService:
    """One service instance serves every child collection."""

    def __init__(self, database: RecordDatabase):
        self.database = database

    def _document(self, collection: ChildCollection, diagram_id: str, payload: Any) -> Dict[str, Any]:
        document = coerce_entity(collection, payload).to_document()
        document["diagramId"] = diagram_id
        return document

    def add(self, collection: ChildCollection, diagram_id: str, payload: Any) -> None:
        document = self._document(collection, diagram_id, payload)
        with self.database.transaction() as conn:
            records.insert(conn, CHILD_MAPPINGS[collection.resource], document)
        logger.debug(f"Added {collection.label} {document['id']!r} to diagram {diagram_id!r}")

    def put(self, collection: ChildCollection, diagram_id: str, payload: Any) -> None:
        """Insert or replace by id."""
        document = self._document(collection, diagram_id, payload)
        with self.database.transaction() as conn:
            records.insert(conn, CHILD_MAPPINGS[collection.resource], document, upsert=True)

    def get(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> Optional[Dict[str, Any]]:
        with self.database.transaction() as conn:
            return records.fetch_one(conn, CHILD_MAPPINGS[collection.resource], entity_id, parent_id=diagram_id)

    def update(self, collection: ChildCollection, entity_id: str, payload: Any) -> None:
        attributes = coerce_patch(collection.patch_model, payload).to_attributes()
        with self.database.transaction() as conn:
            records.update(conn, CHILD_MAPPINGS[collection.resource], entity_id, attributes)

    def delete(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> None:
        with self.database.transaction() as conn:
            records.delete_one(conn, CHILD_MAPPINGS[collection.resource], entity_id, parent_id=diagram_id)

    def list(self, collection: ChildCollection, diagram_id: str) -> List[Dict[str, Any]]:
        with self.database.transaction() as conn:
            return records.fetch_children(conn, CHILD_MAPPINGS[collection.resource], diagram_id)

    def delete_all(self, collection: ChildCollection, diagram_id: str) -> None:
        with self.database.transaction() as conn:
            records.delete_children(conn, CHILD_MAPPINGS[collection.resource], diagram_id)
