"""
ProjectLocationManager: resolves and persists the directory new projects
are created under.
"""

from __future__ import annotations

from typing import Optional

from spark.Config.flags import SparkFlags
from spark.PreferenceGate import PROJECT_FOLDER_KEY, PreferenceStore
from spark.StorageGate import (
    Entry,
    EntryExistsError,
    EntryNotFoundError,
    StorageError,
    StorageProvider,
)
from spark.shared.gate import GateLogger

from .interaction import UserInteraction
from .models import LocationResult, ManagerState

_log = GateLogger.get("LocationGate")

FLAGS_FILE_NAME = ".spark.json"
SUGGESTED_FOLDER_NAME = "projects"
MAX_FOLDER_ATTEMPTS = 50

CHOOSE_FOLDER_MESSAGE = "Please choose a folder to store your Spark projects."
CHOOSE_FOLDER_OK_LABEL = "Choose Folder"
CHOOSE_FOLDER_TITLE = "Choose top-level workspace folder"


class ProjectCreationError(Exception):
    """Raised when no free folder name could be found."""

    def __init__(self, base_name: str):
        super().__init__(f"Error creating project '{base_name}'")
        self.base_name = base_name


class ProjectLocationManager:
    """
    Owns the default project location for one session.

    Use restore_manager() to build one from persisted preferences.
    """

    def __init__(
        self,
        storage: StorageProvider,
        preferences: PreferenceStore,
        interaction: UserInteraction,
        location: Optional[LocationResult] = None,
        sync_root: Optional[Entry] = None,
    ):
        self._storage = storage
        self._preferences = preferences
        self._interaction = interaction
        self._location = location
        self._sync_root = sync_root
        self._state = ManagerState.RESOLVED if location else ManagerState.UNINITIALIZED

    @classmethod
    async def restore_manager(
        cls,
        storage: StorageProvider,
        preferences: PreferenceStore,
        interaction: UserInteraction,
        sync_root: Optional[Entry] = None,
    ) -> ProjectLocationManager:
        """
        Create a manager, restoring the saved project folder if possible.

        A missing or stale token leaves the manager UNINITIALIZED; it is
        never reported as an error.
        """
        manager = cls(storage, preferences, interaction, sync_root=sync_root)

        token = await preferences.get_value(PROJECT_FOLDER_KEY)
        if token is None:
            return manager

        manager._state = ManagerState.RESTORING
        try:
            entry = await storage.restore_handle(token)
        except StorageError as e:
            _log.info(f"Saved project folder is no longer available: {e}")
            manager._state = ManagerState.UNINITIALIZED
            return manager

        await cls._init_flags_from_location(storage, entry)
        manager._set_location(LocationResult(entry, entry, False, storage))
        return manager

    @staticmethod
    async def _init_flags_from_location(storage: StorageProvider, directory: Entry) -> None:
        """
        Load developer flags from <location>/.spark.json when present.

        The file is optional: a missing or unreadable file leaves the
        flags untouched.
        """
        try:
            flags_file = await storage.get_file(directory, FLAGS_FILE_NAME)
        except EntryNotFoundError:
            return

        try:
            text = await storage.read_text(flags_file)
        except StorageError as e:
            _log.warning(f"Ignoring unreadable {FLAGS_FILE_NAME}: {e}")
            return

        try:
            SparkFlags.init_from_text(text)
        except ValueError as e:
            _log.warning(f"Ignoring malformed {FLAGS_FILE_NAME}: {e}")

    # ==================== State ====================

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def location(self) -> Optional[LocationResult]:
        """The cached location, without validating it."""
        return self._location

    def _set_location(self, location: Optional[LocationResult]) -> None:
        self._location = location
        self._state = ManagerState.RESOLVED if location else ManagerState.UNINITIALIZED

    # ==================== Resolution ====================

    async def get_project_location(self) -> Optional[LocationResult]:
        """
        Return the directory to create projects in.

        A cached location that has been deleted is dropped and a new one
        is requested. Returns None if the user cancels.
        """
        if self._location is not None:
            if await self._location.exists():
                return self._location
            _log.info(f"Project folder {self._location.name!r} no longer exists")
            self._set_location(None)

        if self._sync_root is not None:
            self._set_location(LocationResult(self._sync_root, self._sync_root, True, self._storage))
            return self._location

        return await self.choose_new_project_location()

    async def choose_new_project_location(self) -> Optional[LocationResult]:
        """
        Ask the user for a new project folder and remember it.

        Returns None, and persists nothing, if either dialog is cancelled.
        """
        accepted = await self._interaction.confirm(
            CHOOSE_FOLDER_MESSAGE,
            CHOOSE_FOLDER_OK_LABEL,
            CHOOSE_FOLDER_TITLE,
        )
        if not accepted:
            return None

        entry = await self._interaction.pick_directory(SUGGESTED_FOLDER_NAME)
        if entry is None:
            return None

        token = await self._storage.retain_handle(entry)
        await self._preferences.set_value(PROJECT_FOLDER_KEY, token)
        self._set_location(LocationResult(entry, entry, False, self._storage))
        _log.info(f"Project folder set to {entry.full_path}")
        return self._location

    async def create_new_folder(self, base_name: str) -> Optional[LocationResult]:
        """
        Create a new folder in the project location.

        Tries `base_name`, then `base_name-1` up to `base_name-50`, one at
        a time. Returns None if no project location could be resolved.

        Raises:
            ProjectCreationError: if every candidate name is taken
        """
        location = await self.get_project_location()
        if location is None:
            return None

        for count in range(MAX_FOLDER_ATTEMPTS + 1):
            name = base_name if count == 0 else f"{base_name}-{count}"
            try:
                created = await self._storage.create_directory(location.entry, name, exclusive=True)
            except EntryExistsError:
                continue
            _log.debug(f"Created project folder {created.full_path}")
            return LocationResult(location.entry, created, location.is_sync, self._storage)

        raise ProjectCreationError(base_name)


class MockProjectLocationManager(ProjectLocationManager):
    """
    Location manager for tests and demos.

    Ignores saved preferences; setup_root() seeds /rootParent/root in the
    storage provider and uses it as the project location.
    """

    @classmethod
    async def restore_manager(
        cls,
        storage: StorageProvider,
        preferences: PreferenceStore,
        interaction: UserInteraction,
        sync_root: Optional[Entry] = None,
    ) -> MockProjectLocationManager:
        return cls(storage, preferences, interaction, sync_root=sync_root)

    async def setup_root(self) -> LocationResult:
        if self._location is not None:
            return self._location

        root_parent = await self._storage.create_directory(self._storage.root, "rootParent", exclusive=False)
        root = await self._storage.create_directory(root_parent, "root", exclusive=False)
        self._set_location(LocationResult(root_parent, root, False, self._storage))
        return self._location

    async def get_project_location(self) -> Optional[LocationResult]:
        if self._location is None:
            return await super().get_project_location()
        return self._location

    async def create_new_folder(self, base_name: str) -> Optional[LocationResult]:
        """Single exclusive attempt, no disambiguation."""
        location = await self.get_project_location()
        if location is None:
            return None

        try:
            created = await self._storage.create_directory(location.entry, base_name, exclusive=True)
        except EntryExistsError:
            raise ProjectCreationError(base_name) from None
        return LocationResult(location.entry, created, False, self._storage)
