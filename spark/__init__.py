"""
Spark workspace core.

Gates:
- StorageGate: host storage providers (local sandbox, in-memory)
- PreferenceGate: persisted key-value preferences
- WorkspaceGate: resource tree and change events
- LocationGate: default project location and folder creation
"""

from spark.StorageGate import Entry, LocalStorageProvider, MemoryStorageProvider, StorageProvider
from spark.PreferenceGate import JsonPreferenceStore, MemoryPreferenceStore, PreferenceStore
from spark.WorkspaceGate import (
    File,
    Folder,
    Project,
    Resource,
    ResourceChangeEvent,
    ResourceEventType,
    Workspace,
)
from spark.LocationGate import LocationResult, ProjectLocationManager, UserInteraction
from spark.access import FileSystemAccess, MockFileSystemAccess
from spark.session import SparkSession, open_session

__version__ = "0.1.0"

__all__ = [
    "Entry",
    "StorageProvider",
    "LocalStorageProvider",
    "MemoryStorageProvider",
    "PreferenceStore",
    "JsonPreferenceStore",
    "MemoryPreferenceStore",
    "Resource",
    "File",
    "Folder",
    "Project",
    "Workspace",
    "ResourceChangeEvent",
    "ResourceEventType",
    "LocationResult",
    "ProjectLocationManager",
    "UserInteraction",
    "FileSystemAccess",
    "MockFileSystemAccess",
    "SparkSession",
    "open_session",
]
