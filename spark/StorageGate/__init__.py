"""
StorageGate - Host storage access for Spark.

Provides:
- Opaque entry handles for files and directories
- An abstract provider contract (list, read/write, mkdir, metadata,
  retained-handle tokens, display paths)
- A sandboxed local-directory provider
- An in-memory provider for tests and mock sessions

Usage:
    from spark.StorageGate import LocalStorageProvider

    storage = LocalStorageProvider("/home/me/spark")
    children = await storage.list_children(storage.root)
    token = await storage.retain_handle(children[0])
    entry = await storage.restore_handle(token)
"""

from .models import Entry, EntryMetadata
from .provider import (
    StorageProvider,
    StorageError,
    EntryNotFoundError,
    EntryExistsError,
    InvalidTokenError,
)
from .security import PathSecurityError
from .local import LocalStorageProvider
from .memory import MemoryStorageProvider

__all__ = [
    # Models
    "Entry",
    "EntryMetadata",
    # Contract
    "StorageProvider",
    # Providers
    "LocalStorageProvider",
    "MemoryStorageProvider",
    # Errors
    "StorageError",
    "EntryNotFoundError",
    "EntryExistsError",
    "InvalidTokenError",
    "PathSecurityError",
]
