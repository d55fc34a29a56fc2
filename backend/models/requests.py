"""Request envelopes for API endpoints.

Envelope contents are left untyped here; they are validated by the storage
layer so that both backends report malformed input identically.
"""

from pydantic import BaseModel, ConfigDict
from typing import Any


class DiagramRequest(BaseModel):
    """Body of POST /diagrams."""
    diagram: Any = None

    model_config = ConfigDict(extra="ignore")


class AttributesRequest(BaseModel):
    """Body of every PATCH endpoint."""
    attributes: Any = None

    model_config = ConfigDict(extra="ignore")
