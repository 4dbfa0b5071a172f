"""
PreferenceGate - Asynchronous key-value preferences for Spark.

Usage:
    from spark.PreferenceGate import JsonPreferenceStore, PROJECT_FOLDER_KEY

    prefs = JsonPreferenceStore("data/preferences.json")
    token = await prefs.get_value(PROJECT_FOLDER_KEY)
    await prefs.set_value(PROJECT_FOLDER_KEY, "local:...")
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field

from spark.shared.gate import ConfigLoader, GateLogger

_log = GateLogger.get("PreferenceGate")

# Preference keys
PROJECT_FOLDER_KEY = "projectFolder"
WORKSPACE_ROOTS_KEY = "workspaceRoots"


class PreferenceStore(ABC):
    """Asynchronous string key-value store."""

    @abstractmethod
    async def get_value(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is unset."""

    @abstractmethod
    async def set_value(self, key: str, value: str) -> None:
        """Store a value."""

    @abstractmethod
    async def remove_value(self, key: str) -> None:
        """Forget a key. Removing an unset key is a no-op."""


class MemoryPreferenceStore(PreferenceStore):
    """Preferences that live for one process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    async def get_value(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set_value(self, key: str, value: str) -> None:
        self._values[key] = value

    async def remove_value(self, key: str) -> None:
        self._values.pop(key, None)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)


class PreferenceFile(BaseModel):
    """On-disk layout of JsonPreferenceStore."""
    values: Dict[str, str] = Field(default_factory=dict)


class JsonPreferenceStore(PreferenceStore):
    """
    Preferences persisted to a JSON file.

    The file is read lazily on first access and rewritten after each
    change. A corrupt file is logged and treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._data: Optional[PreferenceFile] = None

    @property
    def path(self) -> Path:
        return self._path

    async def _load(self) -> PreferenceFile:
        if self._data is None:
            data = await asyncio.to_thread(ConfigLoader.load, self._path, PreferenceFile, True)
            if data is None:
                _log.warning(f"Ignoring unreadable preferences file: {self._path}")
                data = PreferenceFile()
            self._data = data
        return self._data

    async def _save(self) -> None:
        saved = await asyncio.to_thread(ConfigLoader.save, self._path, self._data)
        if not saved:
            raise OSError(f"Failed to save preferences to {self._path}")

    async def get_value(self, key: str) -> Optional[str]:
        data = await self._load()
        return data.values.get(key)

    async def set_value(self, key: str, value: str) -> None:
        data = await self._load()
        data.values[key] = value
        await self._save()

    async def remove_value(self, key: str) -> None:
        data = await self._load()
        if data.values.pop(key, None) is not None:
            await self._save()


__all__ = [
    "PreferenceStore",
    "MemoryPreferenceStore",
    "JsonPreferenceStore",
    "PreferenceFile",
    "PROJECT_FOLDER_KEY",
    "WORKSPACE_ROOTS_KEY",
]
