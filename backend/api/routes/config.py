"""Config singleton and diagram filter endpoints."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response

from backend.dependencies import get_config_service
from backend.models.responses import ErrorResponse
from backend.services.config_service import ConfigService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["config"], responses={404: {"model": ErrorResponse}})


@router.get("/config")
def get_config(service: ConfigService = Depends(get_config_service)):
    """Get the config singleton."""
    config = service.get_config()
    if config is None:
        raise HTTPException(status_code=404, detail="Config not found")
    return config


@router.put("/config", status_code=204)
def put_config(
    body: Dict[str, Any] = Body(...),
    service: ConfigService = Depends(get_config_service),
):
    """Create or update the config singleton (`{defaultDiagramId}`)."""
    service.put_config(body)
    return Response(status_code=204)


@router.get("/diagram-filters/{diagram_id}")
def get_diagram_filter(diagram_id: str, service: ConfigService = Depends(get_config_service)):
    """Get a diagram's filter; `null` lists mean "no filter"."""
    diagram_filter = service.get_filter(diagram_id)
    if diagram_filter is None:
        raise HTTPException(status_code=404, detail="Diagram filter not found")
    return diagram_filter


@router.put("/diagram-filters/{diagram_id}", status_code=204)
def put_diagram_filter(
    diagram_id: str,
    body: Any = Body(...),
    service: ConfigService = Depends(get_config_service),
):
    """Insert or replace a diagram's filter."""
    service.put_filter(diagram_id, body)
    return Response(status_code=204)


@router.delete("/diagram-filters/{diagram_id}", status_code=204)
def delete_diagram_filter(diagram_id: str, service: ConfigService = Depends(get_config_service)):
    service.delete_filter(diagram_id)
    return Response(status_code=204)
