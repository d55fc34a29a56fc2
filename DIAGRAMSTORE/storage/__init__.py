"""Storage abstraction layer: contract, adapters, migrations and cascades."""

from .collections import (
    AREAS,
    CHILD_COLLECTIONS,
    CUSTOM_TYPES,
    DEPENDENCIES,
    DIAGRAMS,
    RELATIONSHIPS,
    TABLES,
    ChildCollection,
    EntityKind,
)
from .contract import StorageBackend
from .cascade import fan_out
from .bootstrap import ensure_config
from .embedded import EmbeddedStorage, EmbeddedStore
from .remote import ApiClient, RemoteStorage
from .factory import create_storage, open_storage, get_storage, reset_storage

__all__ = [
    "AREAS",
    "CHILD_COLLECTIONS",
    "CUSTOM_TYPES",
    "DEPENDENCIES",
    "DIAGRAMS",
    "RELATIONSHIPS",
    "TABLES",
    "ChildCollection",
    "EntityKind",
    "StorageBackend",
    "fan_out",
    "ensure_config",
    "EmbeddedStorage",
    "EmbeddedStore",
    "ApiClient",
    "RemoteStorage",
    "create_storage",
    "open_storage",
    "get_storage",
    "reset_storage",
]
