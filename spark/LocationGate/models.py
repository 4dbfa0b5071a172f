"""
LocationGate models.
"""

from dataclasses import dataclass, field
from enum import Enum

from spark.StorageGate import Entry, StorageError, StorageProvider


class ManagerState(str, Enum):
    """Lifecycle of a ProjectLocationManager."""
    UNINITIALIZED = "uninitialized"  # no location cached
    RESTORING = "restoring"          # resolving a persisted token
    RESOLVED = "resolved"            # holds a validated LocationResult


@dataclass(frozen=True)
class LocationResult:
    """
    A resolved directory plus where it came from.

    `parent` is kept so the location can be persisted across sessions;
    `is_sync` marks locations on a sync-backed filesystem.
    """
    parent: Entry
    entry: Entry
    is_sync: bool
    storage: StorageProvider = field(compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.entry.name

    async def exists(self) -> bool:
        """
        Whether the directory is still there.

        Sync-backed locations are trusted without a round trip. Any
        metadata failure counts as "gone".
        """
        if self.is_sync:
            return True

        try:
            await self.storage.get_metadata(self.entry)
        except (StorageError, OSError):
            return False
        return True
