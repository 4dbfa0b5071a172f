"""
LocationGate - Where new Spark projects are created.

Provides:
- ProjectLocationManager: restore, validate, choose and persist the
  default project folder
- Collision-free creation of new project folders
- A mock manager rooted at /rootParent/root for tests

Usage:
    from spark.LocationGate import ProjectLocationManager

    manager = await ProjectLocationManager.restore_manager(storage, prefs, dialogs)
    result = await manager.create_new_folder("demo")
    if result is None:
        ...  # user cancelled
"""

from .models import LocationResult, ManagerState
from .interaction import UserInteraction
from .manager import (
    ProjectLocationManager,
    MockProjectLocationManager,
    ProjectCreationError,
    MAX_FOLDER_ATTEMPTS,
    FLAGS_FILE_NAME,
    SUGGESTED_FOLDER_NAME,
    CHOOSE_FOLDER_MESSAGE,
    CHOOSE_FOLDER_OK_LABEL,
    CHOOSE_FOLDER_TITLE,
)

__all__ = [
    # Models
    "LocationResult",
    "ManagerState",
    # Contracts
    "UserInteraction",
    # Managers
    "ProjectLocationManager",
    "MockProjectLocationManager",
    # Errors
    "ProjectCreationError",
    # Constants
    "MAX_FOLDER_ATTEMPTS",
    "FLAGS_FILE_NAME",
    "SUGGESTED_FOLDER_NAME",
    "CHOOSE_FOLDER_MESSAGE",
    "CHOOSE_FOLDER_OK_LABEL",
    "CHOOSE_FOLDER_TITLE",
]
