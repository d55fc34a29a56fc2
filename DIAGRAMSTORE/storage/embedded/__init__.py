"""Embedded (local SQLite) storage backend."""

from .store import EmbeddedStore
from .adapter import EmbeddedStorage

__all__ = ["EmbeddedStore", "EmbeddedStorage"]
