"""
Session bootstrap: builds the storage context, preferences, location
manager and workspace from configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import spark.Config as Config
from spark.access import FileSystemAccess
from spark.LocationGate import ProjectLocationManager, UserInteraction
from spark.PreferenceGate import JsonPreferenceStore, PreferenceStore
from spark.StorageGate import LocalStorageProvider
from spark.WorkspaceGate import Workspace
from spark.shared.gate import GateLogger

_log = GateLogger.get("Session")


@dataclass
class SparkSession:
    """Everything one editor session works with."""
    access: FileSystemAccess
    preferences: PreferenceStore
    workspace: Workspace
    locations: ProjectLocationManager


async def open_session(
    interaction: UserInteraction,
    config: Optional[Config.ConfigManager] = None,
) -> SparkSession:
    """
    Open a session against the configured storage root.

    The storage root directory is created if missing. Previously linked
    workspace roots are restored before this returns.
    """
    config = config or Config.get_manager()

    GateLogger.set_level(config.get("SPARK_LOG_LEVEL", "INFO"))

    storage_root = config.get("SPARK_STORAGE_ROOT")
    Path(storage_root).mkdir(parents=True, exist_ok=True)

    storage = LocalStorageProvider(storage_root)
    preferences = JsonPreferenceStore(config.get("SPARK_PREFERENCES_PATH"))
    access = FileSystemAccess(storage)

    locations = await access.restore_manager(preferences, interaction)

    workspace = Workspace(
        preferences,
        storage,
        max_history=config.get("SPARK_EVENT_HISTORY", 100),
    )
    await workspace.initialize()

    _log.info(f"Session opened on {storage.root_path}")
    return SparkSession(
        access=access,
        preferences=preferences,
        workspace=workspace,
        locations=locations,
    )
