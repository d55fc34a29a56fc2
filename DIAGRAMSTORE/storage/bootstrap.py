"""Guarantee the config singleton exists once storage is open."""

from DIAGRAMSTORE.models import AppConfig
from DIAGRAMSTORE.utils.logging import get_logger

from .contract import StorageBackend

logger = get_logger(__name__)


async def ensure_config(storage: StorageBackend) -> AppConfig:
    """Create the config singleton if it is missing and return it.

    The default diagram is the first stored diagram, or "" when there is
    none. Two processes bootstrapping the same store at the same moment may
    both try to create it; that race is accepted.
    """
    config = await storage.get_config()
    if config is not None:
        return config

    diagrams = await storage.list_diagrams()
    config = AppConfig(id=1, default_diagram_id=diagrams[0].id if diagrams else "")
    await storage.create_config(config)
    logger.info(f"Created config with default diagram {config.default_diagram_id!r}")
    return config
