"""Backend selection and the process-wide storage handle.

The backend is chosen from the `storage` section of config.yaml. Opening a
handle runs migrations (embedded) and bootstraps the config singleton, so
callers never see a half-initialized store.
"""

from typing import Any, Dict, Optional

import httpx

from DIAGRAMSTORE.config import get_config
from DIAGRAMSTORE.utils.error_handling import StorageError
from DIAGRAMSTORE.utils.logging import get_logger

from .bootstrap import ensure_config
from .contract import StorageBackend
from .embedded import EmbeddedStorage
from .remote import RemoteStorage

logger = get_logger(__name__)

DEFAULT_EMBEDDED_PATH = "data/diagrams.db"
DEFAULT_BASE_URL = "http://localhost:3000"

# Global storage handle (lazy initialization)
_storage: Optional[StorageBackend] = None


def create_storage(
    storage_config: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StorageBackend:
    """Build the configured adapter without opening it."""
    if storage_config is None:
        storage_config = get_config("storage")

    backend = storage_config.get("backend", "embedded")
    if backend == "embedded":
        embedded = storage_config.get("embedded") or {}
        return EmbeddedStorage(embedded.get("path", DEFAULT_EMBEDDED_PATH))
    if backend == "remote":
        remote = storage_config.get("remote") or {}
        return RemoteStorage(
            remote.get("base_url", DEFAULT_BASE_URL),
            timeout=remote.get("timeout"),
            transport=transport,
        )
    raise StorageError(f"Unknown storage backend: {backend!r}")


async def open_storage(
    storage_config: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StorageBackend:
    """Build, open and bootstrap the configured adapter."""
    storage = await create_storage(storage_config, transport=transport).open()
    await ensure_config(storage)
    logger.info(f"Storage ready ({storage.name})")
    return storage


async def get_storage() -> StorageBackend:
    """
    Get or open the process-wide storage handle.
    
    Returns:
        The ready StorageBackend configured from config.yaml
    """
    global _storage

    if _storage is None:
        _storage = await open_storage()
    return _storage


async def reset_storage() -> None:
    """Close and forget the process-wide handle (useful for testing)."""
    global _storage

    if _storage is not None:
        await _storage.close()
    _storage = None
