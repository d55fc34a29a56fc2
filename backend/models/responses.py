"""Response models for API endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response of the health check."""
    status: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""
    error: str
