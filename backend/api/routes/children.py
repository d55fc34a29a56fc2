"""Child collection endpoints (tables, relationships, dependencies, areas, custom types).

Every collection exposes the same routes, so the routers are built from the
collection descriptors instead of being written out five times.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response

from backend.dependencies import get_collection_service
from backend.models.requests import AttributesRequest
from backend.services.collection_service import CollectionService
from DIAGRAMSTORE.storage.collections import CHILD_COLLECTIONS, TABLES, ChildCollection


def build_router(collection: ChildCollection) -> APIRouter:
    """Routes for one child collection."""
    router = APIRouter(tags=[collection.resource])
    base = f"/diagrams/{{diagram_id}}/{collection.resource}"
    not_found = f"{collection.label.capitalize()} not found"

    @router.post(base, status_code=204, name=f"add_{collection.attribute}")
    def add(
        diagram_id: str,
        body: Dict[str, Any] = Body(...),
        service: CollectionService = Depends(get_collection_service),
    ):
        service.add(collection, diagram_id, body.get(collection.body_key))
        return Response(status_code=204)

    @router.get(base, name=f"list_{collection.attribute}")
    def list_all(diagram_id: str, service: CollectionService = Depends(get_collection_service)):
        return service.list(collection, diagram_id)

    @router.delete(base, status_code=204, name=f"delete_diagram_{collection.attribute}")
    def delete_all(diagram_id: str, service: CollectionService = Depends(get_collection_service)):
        service.delete_all(collection, diagram_id)
        return Response(status_code=204)

    @router.get(f"{base}/{{entity_id}}", name=f"get_{collection.attribute}")
    def get_one(diagram_id: str, entity_id: str, service: CollectionService = Depends(get_collection_service)):
        entity = service.get(collection, diagram_id, entity_id)
        if entity is None:
            raise HTTPException(status_code=404, detail=not_found)
        return entity

    @router.delete(f"{base}/{{entity_id}}", status_code=204, name=f"delete_{collection.attribute}")
    def delete_one(diagram_id: str, entity_id: str, service: CollectionService = Depends(get_collection_service)):
        service.delete(collection, diagram_id, entity_id)
        return Response(status_code=204)

    @router.patch(f"/{collection.resource}/{{entity_id}}", status_code=204, name=f"update_{collection.attribute}")
    def update_one(
        entity_id: str,
        request: AttributesRequest,
        service: CollectionService = Depends(get_collection_service),
    ):
        service.update(collection, entity_id, request.attributes)
        return Response(status_code=204)

    if collection is TABLES:
        @router.put(base, status_code=204, name="put_table")
        def put_one(
            diagram_id: str,
            body: Dict[str, Any] = Body(...),
            service: CollectionService = Depends(get_collection_service),
        ):
            service.put(collection, diagram_id, body.get(collection.body_key))
            return Response(status_code=204)

    return router


routers: List[APIRouter] = [build_router(collection) for collection in CHILD_COLLECTIONS]
