"""Remote storage backend talking to the record service."""

from .client import ApiClient
from .adapter import RemoteStorage, to_wire

__all__ = ["ApiClient", "RemoteStorage", "to_wire"]
