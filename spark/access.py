"""
Session-scoped access to storage and the project location.

One FileSystemAccess is built per session and passed to whatever needs
storage. MockFileSystemAccess swaps in the in-memory provider and the
mock location manager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from spark.LocationGate import (
    LocationResult,
    MockProjectLocationManager,
    ProjectLocationManager,
    UserInteraction,
)
from spark.PreferenceGate import PreferenceStore
from spark.StorageGate import Entry, MemoryStorageProvider, StorageProvider
from spark.shared.gate import GateLogger, build_health_status

_log = GateLogger.get("Access")


@dataclass(frozen=True)
class WorkspaceRoot:
    """Top-level directory the editor works against."""
    entry: Entry

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def is_sync(self) -> bool:
        return False


@dataclass(frozen=True)
class SyncFolderRoot(WorkspaceRoot):
    """Root on a sync-backed filesystem."""

    @property
    def is_sync(self) -> bool:
        return True


@dataclass(frozen=True)
class FolderChildRoot(WorkspaceRoot):
    """Root that is a child of a regular directory."""
    parent: Optional[Entry] = None


class FileSystemAccess:
    """Storage context for one editor session."""

    manager_class: Type[ProjectLocationManager] = ProjectLocationManager

    def __init__(self, storage: StorageProvider):
        self._storage = storage
        self._location: Optional[LocationResult] = None
        self._root: Optional[WorkspaceRoot] = None
        self._manager: Optional[ProjectLocationManager] = None

    @property
    def storage(self) -> StorageProvider:
        return self._storage

    @property
    def manager(self) -> Optional[ProjectLocationManager]:
        return self._manager

    @property
    def location(self) -> Optional[LocationResult]:
        """Explicitly set location, else whatever the manager has resolved."""
        if self._location is not None:
            return self._location
        if self._manager is not None:
            return self._manager.location
        return None

    @location.setter
    def location(self, value: Optional[LocationResult]) -> None:
        self._location = value

    @property
    def root(self) -> WorkspaceRoot:
        """
        The workspace root, computed from the location on first access.

        Raises:
            RuntimeError: if no location is known yet
        """
        if self._root is None:
            location = self.location
            if location is None:
                raise RuntimeError("No project location has been resolved")
            if location.is_sync:
                self._root = SyncFolderRoot(location.entry)
            else:
                self._root = FolderChildRoot(entry=location.entry, parent=location.parent)
        return self._root

    def set_override_root(self, root: WorkspaceRoot) -> None:
        if self._root is not None:
            raise RuntimeError("Workspace root has already been set")
        self._root = root

    async def get_display_path(self, entry: Entry) -> str:
        return await self._storage.get_display_path(entry)

    async def restore_manager(
        self,
        preferences: PreferenceStore,
        interaction: UserInteraction,
        sync_root: Optional[Entry] = None,
    ) -> ProjectLocationManager:
        self._manager = await self.manager_class.restore_manager(
            self._storage, preferences, interaction, sync_root=sync_root
        )
        _log.debug(f"Location manager restored in state {self._manager.state.value}")
        return self._manager

    def get_health_status(self) -> Dict[str, Any]:
        location = self.location
        return build_health_status(
            gate_name="Access",
            initialized=self._manager is not None,
            dependencies=["StorageGate", "LocationGate"],
            checks={
                "location_resolved": location is not None,
            },
            details={
                "storage": type(self._storage).__name__,
                "location": location.entry.full_path if location else None,
                "manager_state": self._manager.state.value if self._manager else None,
            },
        )


class MockFileSystemAccess(FileSystemAccess):
    """In-memory storage context for tests."""

    manager_class = MockProjectLocationManager

    def __init__(self, storage: Optional[MemoryStorageProvider] = None):
        super().__init__(storage or MemoryStorageProvider())

    async def get_display_path(self, entry: Entry) -> str:
        return entry.full_path
