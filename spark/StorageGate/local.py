"""
Local sandboxed storage provider.

Exposes one directory on disk as a provider-rooted tree. Blocking file
system calls run in worker threads so the event loop never blocks.
"""

import asyncio
import base64
import binascii
import os
from datetime import datetime
from typing import List

from spark.shared.gate import GateLogger

from .models import Entry, EntryMetadata
from .provider import (
    StorageProvider,
    StorageError,
    EntryNotFoundError,
    EntryExistsError,
    InvalidTokenError,
)
from .security import (
    PathSecurityError,
    normalize_path,
    resolve_entry_path,
    to_entry_path,
    validate_entry_name,
)

_log = GateLogger.get("StorageGate.Local")

TOKEN_PREFIX = "local:"


class LocalStorageProvider(StorageProvider):
    """Storage provider backed by a sandboxed local directory."""

    def __init__(self, root_path: str):
        self._root_path = normalize_path(root_path)
        if not os.path.isdir(self._root_path):
            raise EntryNotFoundError(f"Storage root is not a directory: {self._root_path}")
        self._root = Entry(
            name=os.path.basename(self._root_path),
            full_path="/",
            is_directory=True,
        )

    @property
    def root(self) -> Entry:
        return self._root

    @property
    def root_path(self) -> str:
        return self._root_path

    def _abs(self, entry: Entry) -> str:
        return resolve_entry_path(self._root_path, entry.full_path)

    def _entry_for(self, absolute_path: str) -> Entry:
        full_path = to_entry_path(self._root_path, absolute_path)
        if full_path == "/":
            return self._root
        return Entry(
            name=os.path.basename(absolute_path),
            full_path=full_path,
            is_directory=os.path.isdir(absolute_path),
        )

    # ==================== Listing / Lookup ====================

    async def list_children(self, directory: Entry) -> List[Entry]:
        self._require_directory(directory, "list children")
        path = self._abs(directory)

        def _list() -> List[Entry]:
            try:
                with os.scandir(path) as it:
                    return [
                        Entry(
                            name=child.name,
                            full_path=directory.child_path(child.name),
                            is_directory=child.is_dir(),
                        )
                        for child in it
                    ]
            except FileNotFoundError:
                raise EntryNotFoundError(f"Directory does not exist: {directory.full_path}")
            except OSError as e:
                raise StorageError(f"Failed to list directory {directory.full_path}: {e}") from e

        return await asyncio.to_thread(_list)

    async def get_file(self, directory: Entry, name: str) -> Entry:
        self._require_directory(directory, "look up a file")
        validate_entry_name(name)
        path = resolve_entry_path(self._root_path, directory.child_path(name))

        def _lookup() -> Entry:
            if not os.path.isfile(path):
                raise EntryNotFoundError(f"File not found: {directory.child_path(name)}")
            return self._entry_for(path)

        return await asyncio.to_thread(_lookup)

    # ==================== Read / Write ====================

    async def read_text(self, file: Entry) -> str:
        self._require_file(file, "read")
        path = self._abs(file)

        def _read() -> str:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return f.read()
            except FileNotFoundError:
                raise EntryNotFoundError(f"File not found: {file.full_path}")
            except UnicodeDecodeError as e:
                raise StorageError(f"Cannot decode {file.full_path} as utf-8: {e}") from e
            except OSError as e:
                raise StorageError(f"Failed to read {file.full_path}: {e}") from e

        return await asyncio.to_thread(_read)

    async def write_text(self, file: Entry, text: str) -> None:
        self._require_file(file, "write")
        path = self._abs(file)

        def _write() -> None:
            try:
                with open(path, "w", encoding="utf-8") as f:
                    f.write(text)
            except FileNotFoundError:
                raise EntryNotFoundError(f"Parent directory missing for {file.full_path}")
            except OSError as e:
                raise StorageError(f"Failed to write {file.full_path}: {e}") from e

        await asyncio.to_thread(_write)
        _log.debug(f"Wrote {len(text)} characters to {file.full_path}")

    async def create_directory(self, parent: Entry, name: str, exclusive: bool = True) -> Entry:
        self._require_directory(parent, "create a directory")
        validate_entry_name(name)
        path = resolve_entry_path(self._root_path, parent.child_path(name))

        def _mkdir() -> Entry:
            try:
                os.mkdir(path)
            except FileExistsError:
                if exclusive or not os.path.isdir(path):
                    raise EntryExistsError(f"Entry already exists: {parent.child_path(name)}")
            except FileNotFoundError:
                raise EntryNotFoundError(f"Parent directory does not exist: {parent.full_path}")
            except OSError as e:
                raise StorageError(f"Failed to create {parent.child_path(name)}: {e}") from e
            return self._entry_for(path)

        return await asyncio.to_thread(_mkdir)

    # ==================== Metadata ====================

    async def get_metadata(self, entry: Entry) -> EntryMetadata:
        path = self._abs(entry)

        def _stat() -> EntryMetadata:
            try:
                stat = os.stat(path)
            except FileNotFoundError:
                raise EntryNotFoundError(f"Entry does not exist: {entry.full_path}")
            except OSError as e:
                raise StorageError(f"Failed to stat {entry.full_path}: {e}") from e

            is_dir = os.path.isdir(path)
            return EntryMetadata(
                name=entry.name,
                full_path=entry.full_path,
                is_directory=is_dir,
                size_bytes=0 if is_dir else stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime),
            )

        return await asyncio.to_thread(_stat)

    async def get_display_path(self, entry: Entry) -> str:
        return self._abs(entry)

    # ==================== Retained Handles ====================

    async def retain_handle(self, entry: Entry) -> str:
        encoded = base64.urlsafe_b64encode(entry.full_path.encode("utf-8")).decode("ascii")
        return TOKEN_PREFIX + encoded

    async def restore_handle(self, token: str) -> Entry:
        if not token or not token.startswith(TOKEN_PREFIX):
            raise InvalidTokenError(f"Not a local storage token: {token!r}")

        try:
            full_path = base64.urlsafe_b64decode(token[len(TOKEN_PREFIX):]).decode("utf-8")
            path = resolve_entry_path(self._root_path, full_path)
        except (binascii.Error, UnicodeDecodeError, ValueError, PathSecurityError) as e:
            raise InvalidTokenError(f"Malformed token: {e}") from e

        def _restore() -> Entry:
            if not os.path.exists(path):
                raise InvalidTokenError(f"Retained entry no longer exists: {full_path}")
            return self._entry_for(path)

        return await asyncio.to_thread(_restore)
