"""
In-memory storage provider.

Stands in for the host storage API in tests and in MockFileSystemAccess.
Every coroutine yields to the event loop once, so concurrent callers
interleave the way they would against real storage.
"""

import asyncio
import posixpath
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .models import Entry, EntryMetadata
from .provider import (
    StorageProvider,
    StorageError,
    EntryNotFoundError,
    EntryExistsError,
    InvalidTokenError,
)
from .security import validate_entry_name


@dataclass
class _Node:
    is_directory: bool
    content: str = ""
    children: Dict[str, "_Node"] = field(default_factory=dict)
    modified_at: datetime = field(default_factory=datetime.now)


class MemoryStorageProvider(StorageProvider):
    """Storage provider holding a whole tree in memory."""

    def __init__(self):
        self._tree = _Node(is_directory=True)
        self._root = Entry(name="", full_path="/", is_directory=True)
        self._retained: Dict[str, str] = {}

    @property
    def root(self) -> Entry:
        return self._root

    # ==================== Internal helpers ====================

    def _find(self, full_path: str) -> Optional[_Node]:
        node = self._tree
        for part in [p for p in full_path.split("/") if p]:
            if not node.is_directory:
                return None
            node = node.children.get(part)
            if node is None:
                return None
        return node

    def _node(self, entry: Entry) -> _Node:
        node = self._find(entry.full_path)
        if node is None:
            raise EntryNotFoundError(f"Entry does not exist: {entry.full_path}")
        return node

    def _entry(self, full_path: str, node: _Node) -> Entry:
        if full_path == "/":
            return self._root
        return Entry(
            name=posixpath.basename(full_path),
            full_path=full_path,
            is_directory=node.is_directory,
        )

    @staticmethod
    async def _suspend() -> None:
        await asyncio.sleep(0)

    # ==================== Setup helpers ====================

    def make_directory(self, full_path: str) -> Entry:
        """Create a directory (and any missing parents) synchronously."""
        node = self._tree
        current = "/"
        for part in [p for p in full_path.split("/") if p]:
            current = posixpath.join(current, part)
            child = node.children.get(part)
            if child is None:
                child = _Node(is_directory=True)
                node.children[part] = child
            elif not child.is_directory:
                raise EntryExistsError(f"A file is in the way: {current}")
            node = child
        return self._entry(current, node)

    def make_file(self, full_path: str, text: str = "") -> Entry:
        """Create or overwrite a file (and any missing parents) synchronously."""
        parent_path, name = posixpath.split(full_path.rstrip("/"))
        validate_entry_name(name)
        parent = self._node(self.make_directory(parent_path or "/"))
        existing = parent.children.get(name)
        if existing is not None and existing.is_directory:
            raise EntryExistsError(f"A directory is in the way: {full_path}")
        parent.children[name] = _Node(is_directory=False, content=text)
        return self._entry(posixpath.join(parent_path or "/", name), parent.children[name])

    def delete(self, entry: Entry) -> None:
        """Remove an entry (recursively), simulating an external deletion."""
        if entry.full_path == "/":
            raise StorageError("Cannot delete the storage root")
        parent_path, name = posixpath.split(entry.full_path)
        parent = self._find(parent_path or "/")
        if parent is None or name not in parent.children:
            raise EntryNotFoundError(f"Entry does not exist: {entry.full_path}")
        del parent.children[name]

    def exists(self, full_path: str) -> bool:
        return self._find(full_path) is not None

    # ==================== Provider contract ====================

    async def list_children(self, directory: Entry) -> List[Entry]:
        self._require_directory(directory, "list children")
        await self._suspend()
        node = self._node(directory)
        return [
            self._entry(directory.child_path(name), child)
            for name, child in node.children.items()
        ]

    async def get_file(self, directory: Entry, name: str) -> Entry:
        self._require_directory(directory, "look up a file")
        validate_entry_name(name)
        await self._suspend()
        child = self._node(directory).children.get(name)
        if child is None or child.is_directory:
            raise EntryNotFoundError(f"File not found: {directory.child_path(name)}")
        return self._entry(directory.child_path(name), child)

    async def read_text(self, file: Entry) -> str:
        self._require_file(file, "read")
        await self._suspend()
        return self._node(file).content

    async def write_text(self, file: Entry, text: str) -> None:
        self._require_file(file, "write")
        await self._suspend()
        parent_path, name = posixpath.split(file.full_path)
        parent = self._find(parent_path or "/")
        if parent is None:
            raise EntryNotFoundError(f"Parent directory missing for {file.full_path}")
        node = parent.children.get(name)
        if node is None:
            parent.children[name] = _Node(is_directory=False, content=text)
        else:
            node.content = text
            node.modified_at = datetime.now()

    async def create_directory(self, parent: Entry, name: str, exclusive: bool = True) -> Entry:
        self._require_directory(parent, "create a directory")
        validate_entry_name(name)
        await self._suspend()
        parent_node = self._node(parent)
        existing = parent_node.children.get(name)
        if existing is not None:
            if exclusive or not existing.is_directory:
                raise EntryExistsError(f"Entry already exists: {parent.child_path(name)}")
            return self._entry(parent.child_path(name), existing)
        node = _Node(is_directory=True)
        parent_node.children[name] = node
        return self._entry(parent.child_path(name), node)

    async def get_metadata(self, entry: Entry) -> EntryMetadata:
        await self._suspend()
        node = self._node(entry)
        return EntryMetadata(
            name=entry.name,
            full_path=entry.full_path,
            is_directory=node.is_directory,
            size_bytes=0 if node.is_directory else len(node.content.encode("utf-8")),
            modified_at=node.modified_at,
        )

    async def retain_handle(self, entry: Entry) -> str:
        await self._suspend()
        token = uuid.uuid4().hex
        self._retained[token] = entry.full_path
        return token

    async def restore_handle(self, token: str) -> Entry:
        await self._suspend()
        full_path = self._retained.get(token)
        if full_path is None:
            raise InvalidTokenError(f"Unknown token: {token!r}")
        node = self._find(full_path)
        if node is None:
            raise InvalidTokenError(f"Retained entry no longer exists: {full_path}")
        return self._entry(full_path, node)

    async def get_display_path(self, entry: Entry) -> str:
        await self._suspend()
        return entry.full_path
