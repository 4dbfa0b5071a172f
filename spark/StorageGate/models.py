"""
StorageGate models.

Defines entry handles and entry metadata.
"""

import posixpath
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Entry:
    """
    Opaque handle to a file or directory owned by a storage provider.

    full_path is rooted at the provider root ("/").
    """
    name: str
    full_path: str
    is_directory: bool

    @property
    def is_file(self) -> bool:
        return not self.is_directory

    def child_path(self, name: str) -> str:
        """Provider path of a direct child named `name`."""
        return posixpath.join(self.full_path, name)


class EntryMetadata(BaseModel):
    """Metadata about a file or directory."""
    name: str
    full_path: str = Field(description="Provider-rooted path")
    is_directory: bool
    size_bytes: int = 0
    modified_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return self.model_dump(mode="json")
