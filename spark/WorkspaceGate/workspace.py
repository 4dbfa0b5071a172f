"""
The Workspace: root container of linked files and projects.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

from spark.PreferenceGate import WORKSPACE_ROOTS_KEY, PreferenceStore
from spark.StorageGate import Entry, InvalidTokenError, StorageError, StorageProvider
from spark.shared.events import EventBus
from spark.shared.gate import GateLogger, build_health_status

from .models import ResourceChangeEvent, ResourceEventType
from .resources import (
    Container,
    File,
    Folder,
    Project,
    Resource,
    ResourceNotLinkedError,
)

_log = GateLogger.get("WorkspaceGate")


class Workspace(Container):
    """
    The root of the resource tree.

    Top-level children are loose files and projects. Every mutation made
    through the workspace is broadcast as a ResourceChangeEvent to all
    current subscribers.
    """

    def __init__(
        self,
        preference_store: PreferenceStore,
        storage: StorageProvider,
        max_history: int = 100,
    ):
        super().__init__()
        self._store = preference_store
        self._storage = storage
        self._bus = EventBus(max_history=max_history)
        self._initialized = False

    # The workspace sits above every resource, so these are always empty.

    @property
    def name(self) -> Optional[str]:
        return None

    @property
    def parent(self) -> Optional[Container]:
        return None

    @property
    def project(self) -> Optional[Project]:
        return None

    @property
    def storage(self) -> StorageProvider:
        return self._storage

    @property
    def preference_store(self) -> PreferenceStore:
        return self._store

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ==================== Tree mutation ====================

    async def link(self, entry: Entry) -> Resource:
        """
        Attach a storage entry as a top-level resource.

        A file becomes a loose File. A directory becomes a Project whose
        subtree is populated from storage before this returns. The ADD
        event is published as soon as the resource is attached, so
        subscribers may see the project before its children exist.

        If population fails the project stays attached with whatever
        children were already added and the storage error propagates.
        """
        if self._storage.is_file(entry):
            resource: Resource = File(self, entry)
            self._add_child(resource)
            self.notify(resource, ResourceEventType.ADD)
            return resource

        project = Project(self, entry)
        self._add_child(project)
        self.notify(project, ResourceEventType.ADD)
        await self._gather_children(project)
        return project

    async def _gather_children(self, container: Folder) -> Folder:
        entries = await self._storage.list_children(container.entry)

        pending = []
        for entry in entries:
            if self._storage.is_file(entry):
                container._add_child(File(container, entry))
            else:
                folder = Folder(container, entry)
                container._add_child(folder)
                pending.append(self._gather_children(folder))

        # Sibling folders populate concurrently. Every branch settles before
        # the first failure is raised.
        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return container

    def unlink(self, resource: Resource) -> None:
        """
        Detach a resource (and its subtree) from the workspace.

        Storage is not touched. Exactly one DELETE event is published,
        for the resource itself.

        Raises:
            ResourceNotLinkedError: if the resource is not attached here
        """
        parent = resource.parent
        if parent is None or resource.workspace is not self:
            raise ResourceNotLinkedError(f"Resource is not linked into this workspace: {resource!r}")
        if not parent._remove_child(resource):
            raise ResourceNotLinkedError(f"Resource is missing from its parent: {resource!r}")

        path = resource.path
        resource._detach()
        self._bus.publish(ResourceChangeEvent(resource, ResourceEventType.DELETE))
        _log.debug(f"DELETE {path}")

    # ==================== Queries ====================

    def get_files(self) -> List[File]:
        """Loose top-level files."""
        return [child for child in self._children if isinstance(child, File)]

    def get_projects(self) -> List[Project]:
        return [child for child in self._children if isinstance(child, Project)]

    # ==================== Events ====================

    def subscribe(self) -> asyncio.Queue:
        """Receive every ResourceChangeEvent published from now on."""
        return self._bus.subscribe()

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._bus.unsubscribe(queue)

    def get_recent(self, count: int = 20) -> List[ResourceChangeEvent]:
        return self._bus.get_recent(count)

    def notify(self, resource: Resource, event_type: ResourceEventType) -> None:
        """Broadcast a change to a resource in this workspace."""
        self._bus.publish(ResourceChangeEvent(resource, event_type))
        _log.debug(f"{event_type} {resource.path}")

    # ==================== Persistence ====================

    async def save(self) -> None:
        """Persist retained-handle tokens for every top-level resource."""
        tokens = [await self._storage.retain_handle(child.entry) for child in self._children]
        await self._store.set_value(WORKSPACE_ROOTS_KEY, json.dumps(tokens))
        _log.info(f"Saved {len(tokens)} workspace root(s)")

    async def initialize(self) -> Workspace:
        """
        Re-link the roots stored by save(), in their saved order.

        Tokens that no longer restore are skipped. Calling this again
        after it has completed is a no-op. If a root fails to link, every
        root added by this call is unlinked again before the error
        propagates, so a retry starts from a clean workspace.
        """
        if self._initialized:
            return self

        raw = await self._store.get_value(WORKSPACE_ROOTS_KEY)
        tokens: List[str] = []
        if raw:
            try:
                tokens = json.loads(raw)
            except ValueError as e:
                _log.warning(f"Ignoring malformed {WORKSPACE_ROOTS_KEY} preference: {e}")
            if not isinstance(tokens, list):
                _log.warning(f"Ignoring malformed {WORKSPACE_ROOTS_KEY} preference: not a list")
                tokens = []

        existing = list(self._children)
        restored = 0
        try:
            for token in tokens:
                try:
                    entry = await self._storage.restore_handle(str(token))
                except InvalidTokenError as e:
                    _log.warning(f"Skipping stale workspace root: {e}")
                    continue
                await self.link(entry)
                restored += 1
        except StorageError:
            for child in self.get_children():
                if not any(child is old for old in existing):
                    self.unlink(child)
            raise

        self._initialized = True
        _log.info(f"Workspace initialized with {restored} root(s)")
        return self

    # ==================== Health ====================

    def get_health_status(self) -> Dict[str, Any]:
        return build_health_status(
            gate_name="WorkspaceGate",
            initialized=self._initialized,
            dependencies=["StorageGate", "PreferenceGate"],
            checks={
                "storage_configured": self._storage is not None,
                "preferences_configured": self._store is not None,
            },
            details={
                "projects": len(self.get_projects()),
                "files": len(self.get_files()),
                "subscribers": self._bus.subscriber_count,
            },
        )
