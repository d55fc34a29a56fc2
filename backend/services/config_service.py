"""Config singleton and per-diagram filters."""

import logging
from typing import Any, Dict, Optional

from backend.models.columns import CONFIG, DIAGRAM_FILTERS, DIAGRAMS
from backend.services import records
from backend.utils.database import RecordDatabase
from DIAGRAMSTORE.models import AppConfig, ConfigPatch, DiagramFilter
from DIAGRAMSTORE.storage.collections import CONFIG_ID
from DIAGRAMSTORE.storage.validation import coerce_model, coerce_patch
from DIAGRAMSTORE.utils.error_handling import ValidationError

logger = logging.getLogger(__name__)


class ConfigService:
    """Reads and writes the config row and diagram filters."""

    def __init__(self, database: RecordDatabase):
        self.database = database

    def get_config(self) -> Optional[Dict[str, Any]]:
        with self.database.transaction() as conn:
            return records.fetch_one(conn, CONFIG, CONFIG_ID)

    def put_config(self, payload: Any) -> None:
        """Insert or update the singleton's default diagram id."""
        attributes = coerce_patch(ConfigPatch, payload).to_attributes()
        if attributes.get("defaultDiagramId") is None:
            raise ValidationError("Missing defaultDiagramId")
        config = AppConfig(id=CONFIG_ID, default_diagram_id=attributes["defaultDiagramId"])
        with self.database.transaction() as conn:
            records.insert(conn, CONFIG, config.to_document(), upsert=True)

    def ensure_config(self) -> Dict[str, Any]:
        """Create the singleton at startup if it is missing."""
        with self.database.transaction() as conn:
            existing = records.fetch_one(conn, CONFIG, CONFIG_ID)
            if existing is not None:
                return existing
            diagrams = records.fetch_all(conn, DIAGRAMS)
            config = AppConfig(id=CONFIG_ID, default_diagram_id=diagrams[0]["id"] if diagrams else "")
            records.insert(conn, CONFIG, config.to_document())
        logger.info(f"Created config with default diagram {config.default_diagram_id!r}")
        return config.to_document()

    def get_filter(self, diagram_id: str) -> Optional[Dict[str, Any]]:
        with self.database.transaction() as conn:
            return records.fetch_one(conn, DIAGRAM_FILTERS, diagram_id)

    def put_filter(self, diagram_id: str, payload: Any) -> None:
        if not isinstance(payload, dict):
            raise ValidationError("Invalid or missing filter object")
        diagram_filter = coerce_model(DiagramFilter, {**payload, "diagramId": diagram_id}, "filter")
        with self.database.transaction() as conn:
            records.insert(conn, DIAGRAM_FILTERS, diagram_filter.to_document(), upsert=True)

    def delete_filter(self, diagram_id: str) -> None:
        with self.database.transaction() as conn:
            records.delete_one(conn, DIAGRAM_FILTERS, diagram_id)
