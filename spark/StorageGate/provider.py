"""
StorageGate provider contract.

Every storage backend (local sandbox, in-memory mock) implements
StorageProvider. All I/O methods are coroutines; the type checks on
entries are synchronous because the handle already knows its kind.
"""

from abc import ABC, abstractmethod
from typing import List

from .models import Entry, EntryMetadata


class StorageError(Exception):
    """Base class for storage provider failures."""
    pass


class EntryNotFoundError(StorageError):
    """Raised when an entry does not exist (or no longer exists)."""
    pass


class EntryExistsError(StorageError):
    """Raised when an exclusive create collides with an existing entry."""
    pass


class InvalidTokenError(StorageError):
    """Raised when a retained-handle token cannot be restored."""
    pass


class StorageProvider(ABC):
    """Abstract host storage API."""

    @property
    @abstractmethod
    def root(self) -> Entry:
        """The provider's root directory."""

    def is_directory(self, entry: Entry) -> bool:
        return entry.is_directory

    def is_file(self, entry: Entry) -> bool:
        return not entry.is_directory

    @abstractmethod
    async def list_children(self, directory: Entry) -> List[Entry]:
        """List the immediate children of a directory, in listing order."""

    @abstractmethod
    async def read_text(self, file: Entry) -> str:
        """Read a file as text."""

    @abstractmethod
    async def write_text(self, file: Entry, text: str) -> None:
        """Replace a file's contents."""

    @abstractmethod
    async def create_directory(self, parent: Entry, name: str, exclusive: bool = True) -> Entry:
        """
        Create a directory under `parent`.

        Raises:
            EntryExistsError: if `exclusive` and `name` already exists
        """

    @abstractmethod
    async def get_file(self, directory: Entry, name: str) -> Entry:
        """
        Look up a child file by name.

        Raises:
            EntryNotFoundError: if there is no such file
        """

    @abstractmethod
    async def get_metadata(self, entry: Entry) -> EntryMetadata:
        """
        Fetch metadata for an entry.

        Raises:
            EntryNotFoundError: if the entry is gone
        """

    @abstractmethod
    async def retain_handle(self, entry: Entry) -> str:
        """Return an opaque, persistable token for `entry`."""

    @abstractmethod
    async def restore_handle(self, token: str) -> Entry:
        """
        Exchange a token from retain_handle() back for its entry.

        Raises:
            InvalidTokenError: if the token is unknown or its target is gone
        """

    @abstractmethod
    async def get_display_path(self, entry: Entry) -> str:
        """Human-readable path for UI."""

    def _require_directory(self, entry: Entry, operation: str) -> None:
        if not entry.is_directory:
            raise StorageError(f"Cannot {operation}: {entry.full_path} is not a directory")

    def _require_file(self, entry: Entry, operation: str) -> None:
        if entry.is_directory:
            raise StorageError(f"Cannot {operation}: {entry.full_path} is a directory, not a file")
