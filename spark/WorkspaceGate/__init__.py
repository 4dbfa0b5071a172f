"""
WorkspaceGate - The in-memory resource tree for Spark.

Provides:
- Resource / Folder / Project / File nodes mirroring storage entries
- A Workspace root that links entries in as loose files or projects
- Broadcast ResourceChangeEvents (ADD, DELETE, CHANGE) to subscribers
- Persistence of top-level roots through retained-handle tokens

Usage:
    from spark.WorkspaceGate import Workspace

    workspace = Workspace(preferences, storage)
    await workspace.initialize()

    events = workspace.subscribe()
    project = await workspace.link(entry)
    event = await events.get()      # ADD for project

    await workspace.save()
"""

from .models import ResourceKind, ResourceEventType, ResourceChangeEvent
from .resources import (
    Container,
    Resource,
    Folder,
    Project,
    File,
    ResourceNotLinkedError,
)
from .workspace import Workspace

__all__ = [
    # Models
    "ResourceKind",
    "ResourceEventType",
    "ResourceChangeEvent",
    # Tree
    "Container",
    "Resource",
    "Folder",
    "Project",
    "File",
    "Workspace",
    # Errors
    "ResourceNotLinkedError",
]
