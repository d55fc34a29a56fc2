"""Diagram endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from backend.dependencies import get_diagram_service
from backend.models.requests import AttributesRequest, DiagramRequest
from backend.models.responses import ErrorResponse
from backend.services.diagram_service import DiagramService
from DIAGRAMSTORE.models import DiagramIncludeOptions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/diagrams", tags=["diagrams"], responses={400: {"model": ErrorResponse}})


def include_options(
    include_tables: bool = Query(False, alias="includeTables"),
    include_relationships: bool = Query(False, alias="includeRelationships"),
    include_dependencies: bool = Query(False, alias="includeDependencies"),
    include_areas: bool = Query(False, alias="includeAreas"),
    include_custom_types: bool = Query(False, alias="includeCustomTypes"),
) -> DiagramIncludeOptions:
    """Which child lists to attach, from `includeX=true` query parameters."""
    return DiagramIncludeOptions(
        include_tables=include_tables,
        include_relationships=include_relationships,
        include_dependencies=include_dependencies,
        include_areas=include_areas,
        include_custom_types=include_custom_types,
    )


@router.post("", status_code=204)
def create_diagram(request: DiagramRequest, service: DiagramService = Depends(get_diagram_service)):
    """Create a diagram, together with any child lists it carries."""
    service.create(request.diagram)
    return Response(status_code=204)


@router.get("")
def list_diagrams(
    options: DiagramIncludeOptions = Depends(include_options),
    service: DiagramService = Depends(get_diagram_service),
):
    return service.list(options)


@router.get("/{diagram_id}")
def get_diagram(
    diagram_id: str,
    options: DiagramIncludeOptions = Depends(include_options),
    service: DiagramService = Depends(get_diagram_service),
):
    diagram = service.get(diagram_id, options)
    if diagram is None:
        raise HTTPException(status_code=404, detail="Diagram not found")
    return diagram


@router.patch("/{diagram_id}", status_code=204)
def update_diagram(
    diagram_id: str,
    request: AttributesRequest,
    service: DiagramService = Depends(get_diagram_service),
):
    """Partially update a diagram. A new `id` is propagated to its children."""
    service.update(diagram_id, request.attributes)
    return Response(status_code=204)


@router.delete("/{diagram_id}", status_code=204)
def delete_diagram(diagram_id: str, service: DiagramService = Depends(get_diagram_service)):
    """Delete a diagram and everything it owns, atomically."""
    service.delete(diagram_id)
    return Response(status_code=204)
