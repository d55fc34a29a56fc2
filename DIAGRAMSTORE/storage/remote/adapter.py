"""Remote backend: the storage contract over the record service's REST API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic.alias_generators import to_camel

from DIAGRAMSTORE.models import (
    AppConfig,
    Diagram,
    DiagramFilter,
    DiagramIncludeOptions,
    StorageModel,
    Timestamp,
    to_wire_datetime,
)
from DIAGRAMSTORE.models.entities import CHILD_LIST_FIELDS
from DIAGRAMSTORE.utils.error_handling import NotFoundError
from DIAGRAMSTORE.utils.logging import get_logger

from ..collections import ChildCollection
from ..contract import Attributes, StorageBackend
from ..validation import load_document, load_documents
from .client import ApiClient

logger = get_logger(__name__)

TIMESTAMP_ATTRIBUTES = ("createdAt", "updatedAt")
_TIMESTAMP = TypeAdapter(Timestamp)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def to_wire(document: Dict[str, Any]) -> Dict[str, Any]:
    """Top-level timestamps in the service's `YYYY-MM-DD HH:MM:SS` form.

    Attached child lists of a diagram are converted as well.
    """
    wire = dict(document)
    for name in TIMESTAMP_ATTRIBUTES:
        if wire.get(name) is not None:
            wire[name] = to_wire_datetime(_TIMESTAMP.validate_python(wire[name]))
    for name in CHILD_LIST_FIELDS:
        key = to_camel(name)
        if isinstance(wire.get(key), list):
            wire[key] = [to_wire(child) for child in wire[key]]
    return wire


class RemoteStorage(StorageBackend):
    """Storage contract implementation that talks to the record service."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = ApiClient(base_url, timeout=timeout, transport=transport)

    async def open(self) -> "RemoteStorage":
        logger.info(f"Remote storage using {self.client.base_url}")
        return self

    async def close(self) -> None:
        await self.client.close()

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    async def _get_config(self) -> Optional[AppConfig]:
        body = await self.client.get("/config", allow_not_found=True)
        return load_document(AppConfig, body)

    async def _create_config(self, config: AppConfig) -> None:
        await self.client.put("/config", {"defaultDiagramId": config.default_diagram_id})

    async def _update_config(self, attributes: Attributes) -> None:
        # PUT /config upserts, so the singleton must be checked for first
        if await self.client.get("/config", allow_not_found=True) is None:
            raise NotFoundError("Config has not been created")
        await self.client.put("/config", attributes)

    # ------------------------------------------------------------------
    # Diagram filters
    # ------------------------------------------------------------------

    async def _get_diagram_filter(self, diagram_id: str) -> Optional[DiagramFilter]:
        body = await self.client.get(f"/diagram-filters/{_segment(diagram_id)}", allow_not_found=True)
        return load_document(DiagramFilter, body)

    async def _put_diagram_filter(self, diagram_filter: DiagramFilter) -> None:
        await self.client.put(
            f"/diagram-filters/{_segment(diagram_filter.diagram_id)}", diagram_filter.to_document()
        )

    async def _delete_diagram_filter(self, diagram_id: str) -> None:
        await self.client.delete(f"/diagram-filters/{_segment(diagram_id)}")

    # ------------------------------------------------------------------
    # Diagrams
    # ------------------------------------------------------------------

    async def _add_diagram(self, diagram: Diagram) -> None:
        await self.client.post("/diagrams", {"diagram": to_wire(diagram.to_document())})

    async def _list_diagrams(self, options: DiagramIncludeOptions) -> List[Diagram]:
        body = await self.client.get("/diagrams", params=options.to_query_params())
        return load_documents(Diagram, body)

    async def _get_diagram(self, diagram_id: str, options: DiagramIncludeOptions) -> Optional[Diagram]:
        body = await self.client.get(
            f"/diagrams/{_segment(diagram_id)}",
            params=options.to_query_params(),
            allow_not_found=True,
        )
        return load_document(Diagram, body)

    async def _update_diagram(self, diagram_id: str, attributes: Attributes) -> None:
        await self.client.patch(f"/diagrams/{_segment(diagram_id)}", {"attributes": to_wire(attributes)})

    async def _delete_diagram(self, diagram_id: str) -> None:
        await self.client.delete(f"/diagrams/{_segment(diagram_id)}")

    # ------------------------------------------------------------------
    # Child collections
    # ------------------------------------------------------------------

    @staticmethod
    def _collection_path(collection: ChildCollection, diagram_id: str) -> str:
        return f"/diagrams/{_segment(diagram_id)}/{collection.resource}"

    @staticmethod
    def _envelope(collection: ChildCollection, diagram_id: str, entity: StorageModel) -> Dict[str, Any]:
        document = to_wire(entity.to_document())
        document["diagramId"] = diagram_id
        return {collection.body_key: document}

    async def _add_child(self, collection: ChildCollection, diagram_id: str, entity: StorageModel) -> None:
        await self.client.post(
            self._collection_path(collection, diagram_id), self._envelope(collection, diagram_id, entity)
        )

    async def _put_child(self, collection: ChildCollection, diagram_id: str, entity: StorageModel) -> None:
        await self.client.put(
            self._collection_path(collection, diagram_id), self._envelope(collection, diagram_id, entity)
        )

    async def _get_child(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> Optional[StorageModel]:
        body = await self.client.get(
            f"{self._collection_path(collection, diagram_id)}/{_segment(entity_id)}",
            allow_not_found=True,
        )
        return load_document(collection.model, body)

    async def _update_child(self, collection: ChildCollection, entity_id: str, attributes: Attributes) -> None:
        await self.client.patch(
            f"/{collection.resource}/{_segment(entity_id)}", {"attributes": to_wire(attributes)}
        )

    async def _delete_child(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> None:
        await self.client.delete(f"{self._collection_path(collection, diagram_id)}/{_segment(entity_id)}")

    async def _list_children(self, collection: ChildCollection, diagram_id: str) -> List[StorageModel]:
        body = await self.client.get(self._collection_path(collection, diagram_id))
        return load_documents(collection.model, body)

    async def _delete_children(self, collection: ChildCollection, diagram_id: str) -> None:
        await self.client.delete(self._collection_path(collection, diagram_id))
