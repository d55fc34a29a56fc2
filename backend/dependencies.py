"""FastAPI dependencies."""

from functools import lru_cache

from fastapi import Depends

from backend.config import settings
from backend.services.collection_service import CollectionService
from backend.services.config_service import ConfigService
from backend.services.diagram_service import DiagramService
from backend.utils.database import RecordDatabase


# Process-wide singleton; tests override it with a temporary database
@lru_cache(maxsize=1)
def get_database() -> RecordDatabase:
    """Singleton RecordDatabase at the configured path."""
    return RecordDatabase(settings.database_path)


def get_config_service(database: RecordDatabase = Depends(get_database)) -> ConfigService:
    return ConfigService(database)


def get_diagram_service(database: RecordDatabase = Depends(get_database)) -> DiagramService:
    return DiagramService(database)


def get_collection_service(database: RecordDatabase = Depends(get_database)) -> CollectionService:
    return CollectionService(database)
