"""
User interaction contract consumed by the location manager.
"""

from abc import ABC, abstractmethod
from typing import Optional

from spark.StorageGate import Entry


class UserInteraction(ABC):
    """Dialogs the editor shell provides."""

    @abstractmethod
    async def confirm(self, message: str, ok_label: str, title: str) -> bool:
        """Show an OK/Cancel prompt. Returns False when dismissed."""

    @abstractmethod
    async def pick_directory(self, suggested_name: str) -> Optional[Entry]:
        """Let the user choose a directory. Returns None on cancel."""
