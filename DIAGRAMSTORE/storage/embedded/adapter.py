"""Embedded backend: the storage contract over a local SQLite document store."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence

from DIAGRAMSTORE.models import AppConfig, Diagram, DiagramFilter, DiagramIncludeOptions, StorageModel
from DIAGRAMSTORE.utils.error_handling import NotFoundError
from DIAGRAMSTORE.utils.logging import get_logger

from ..cascade import fan_out
from ..collections import (
    CHILD_COLLECTIONS,
    CONFIG_ID,
    CONFIG_STORE,
    DIAGRAM_FILTERS_STORE,
    DIAGRAMS_STORE,
    ChildCollection,
)
from ..contract import Attributes, StorageBackend
from ..validation import load_document, load_documents
from .migrations import MigrationRunner, MigrationStep
from .store import EmbeddedStore

logger = get_logger(__name__)


class EmbeddedStorage(StorageBackend):
    """Storage contract implementation backed by `EmbeddedStore`.

    `open()` connects and runs pending migrations before anything else can
    touch the store.
    """

    name = "embedded"

    def __init__(self, path: str, migrations: Optional[Sequence[MigrationStep]] = None):
        self.store = EmbeddedStore(path)
        self._migrations = migrations

    async def _run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return await asyncio.to_thread(func, *args, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _open_sync(self) -> int:
        self.store.connect()
        try:
            return MigrationRunner(self.store, self._migrations).run()
        except Exception:
            self.store.close()
            raise

    async def open(self) -> "EmbeddedStorage":
        version = await self._run(self._open_sync)
        logger.info(f"Embedded storage ready at version {version}")
        return self

    async def close(self) -> None:
        await self._run(self.store.close)

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    async def _get_config(self) -> Optional[AppConfig]:
        return load_document(AppConfig, await self._run(self.store.get, CONFIG_STORE, CONFIG_ID))

    async def _create_config(self, config: AppConfig) -> None:
        await self._run(self.store.add, CONFIG_STORE, config.to_document())

    async def _update_config(self, attributes: Attributes) -> None:
        updated = await self._run(self.store.update, CONFIG_STORE, CONFIG_ID, attributes)
        if not updated:
            raise NotFoundError("Config has not been created")

    # ------------------------------------------------------------------
    # Diagram filters
    # ------------------------------------------------------------------

    async def _get_diagram_filter(self, diagram_id: str) -> Optional[DiagramFilter]:
        return load_document(DiagramFilter, await self._run(self.store.get, DIAGRAM_FILTERS_STORE, diagram_id))

    async def _put_diagram_filter(self, diagram_filter: DiagramFilter) -> None:
        await self._run(self.store.put, DIAGRAM_FILTERS_STORE, diagram_filter.to_document())

    async def _delete_diagram_filter(self, diagram_id: str) -> None:
        await self._run(self.store.delete, DIAGRAM_FILTERS_STORE, diagram_id)

    # ------------------------------------------------------------------
    # Diagrams
    # ------------------------------------------------------------------

    def _add_diagram_sync(self, diagram: Diagram) -> None:
        with self.store.transaction():
            self.store.add(DIAGRAMS_STORE, diagram.record())
            for collection in CHILD_COLLECTIONS:
                for child in getattr(diagram, collection.attribute) or []:
                    self.store.add(collection.store_name, self._child_document(diagram.id, child))

    async def _add_diagram(self, diagram: Diagram) -> None:
        await self._run(self._add_diagram_sync, diagram)

    async def _with_children(self, document: Dict[str, Any], options: DiagramIncludeOptions) -> Diagram:
        diagram = load_document(Diagram, document)
        if not options.any():
            return diagram

        wanted = [
            collection
            for collection in CHILD_COLLECTIONS
            if getattr(options, f"include_{collection.attribute}")
        ]

        lists = await asyncio.gather(*(self._list_children(c, diagram.id) for c in wanted))
        return diagram.model_copy(
            update={collection.attribute: children for collection, children in zip(wanted, lists)}
        )

    async def _list_diagrams(self, options: DiagramIncludeOptions) -> List[Diagram]:
        documents = await self._run(self.store.all, DIAGRAMS_STORE)
        return list(await asyncio.gather(*(self._with_children(doc, options) for doc in documents)))

    async def _get_diagram(self, diagram_id: str, options: DiagramIncludeOptions) -> Optional[Diagram]:
        document = await self._run(self.store.get, DIAGRAMS_STORE, diagram_id)
        if document is None:
            return None
        return await self._with_children(document, options)

    async def _update_diagram(self, diagram_id: str, attributes: Attributes) -> None:
        updated = await self._run(self.store.update, DIAGRAMS_STORE, diagram_id, attributes)
        new_id = attributes.get("id")
        if not updated or new_id is None or new_id == diagram_id:
            return

        logger.info(f"Renaming diagram {diagram_id!r} to {new_id!r}")
        steps = {
            collection.store_name: self._run(
                self.store.modify, collection.store_name, {"diagramId": new_id}, diagramId=diagram_id
            )
            for collection in CHILD_COLLECTIONS
        }
        steps[DIAGRAM_FILTERS_STORE] = self._run(
            self.store.modify, DIAGRAM_FILTERS_STORE, {"diagramId": new_id}, diagramId=diagram_id
        )
        await fan_out("rename", diagram_id, steps)

    async def _delete_diagram(self, diagram_id: str) -> None:
        steps = {DIAGRAMS_STORE: self._run(self.store.delete, DIAGRAMS_STORE, diagram_id)}
        for collection in CHILD_COLLECTIONS:
            steps[collection.store_name] = self._run(
                self.store.delete_where, collection.store_name, diagramId=diagram_id
            )
        steps[DIAGRAM_FILTERS_STORE] = self._run(self.store.delete, DIAGRAM_FILTERS_STORE, diagram_id)
        await fan_out("delete", diagram_id, steps)

    # ------------------------------------------------------------------
    # Child collections
    # ------------------------------------------------------------------

    @staticmethod
    def _child_document(diagram_id: str, entity: StorageModel) -> Dict[str, Any]:
        document = entity.to_document()
        document["diagramId"] = diagram_id
        return document

    async def _add_child(self, collection: ChildCollection, diagram_id: str, entity: StorageModel) -> None:
        await self._run(self.store.add, collection.store_name, self._child_document(diagram_id, entity))

    async def _put_child(self, collection: ChildCollection, diagram_id: str, entity: StorageModel) -> None:
        await self._run(self.store.put, collection.store_name, self._child_document(diagram_id, entity))

    async def _get_child(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> Optional[StorageModel]:
        document = await self._run(self.store.get, collection.store_name, entity_id, diagramId=diagram_id)
        return load_document(collection.model, document)

    async def _update_child(self, collection: ChildCollection, entity_id: str, attributes: Attributes) -> None:
        await self._run(self.store.update, collection.store_name, entity_id, attributes)

    async def _delete_child(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> None:
        await self._run(self.store.delete, collection.store_name, entity_id, diagramId=diagram_id)

    async def _list_children(self, collection: ChildCollection, diagram_id: str) -> List[StorageModel]:
        documents = await self._run(self.store.find, collection.store_name, diagramId=diagram_id)
        return load_documents(collection.model, collection.sort_documents(documents))

    async def _delete_children(self, collection: ChildCollection, diagram_id: str) -> None:
        await self._run(self.store.delete_where, collection.store_name, diagramId=diagram_id)
