"""
WorkspaceGate event and discriminant types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from .resources import Resource


class ResourceKind(str, Enum):
    """Closed set of resource variants."""
    FILE = "file"
    FOLDER = "folder"
    PROJECT = "project"


class ResourceEventType(str, Enum):
    """What happened to a resource."""
    ADD = "ADD"          # resource has been added to the workspace
    DELETE = "DELETE"    # resource has been removed from the workspace
    CHANGE = "CHANGE"    # resource contents have changed

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResourceChangeEvent:
    """A change to the workspace, broadcast to subscribers."""
    resource: "Resource"
    type: ResourceEventType

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "type": self.type.value,
            "kind": self.resource.kind.value,
            "name": self.resource.name,
            "path": self.resource.path,
        }
