"""
Resource tree node types.

Ownership flows parent -> child: a container holds strong references to
its children, a child holds only a weak reference back to its container.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Iterator, List, Optional

from spark.StorageGate import Entry

from .models import ResourceEventType, ResourceKind

if TYPE_CHECKING:
    from .workspace import Workspace


class ResourceNotLinkedError(Exception):
    """Raised when an operation needs a resource that is attached to a workspace."""
    pass


class Container:
    """Capability of holding an ordered list of child resources."""

    def __init__(self):
        self._children: List[Resource] = []

    def get_children(self) -> List[Resource]:
        """Direct children, in insertion order."""
        return list(self._children)

    def get_child(self, name: str) -> Optional[Resource]:
        for child in self._children:
            if child.name == name:
                return child
        return None

    def traverse(self) -> Iterator[Resource]:
        """Depth-first walk over every descendant."""
        for child in self._children:
            yield child
            if isinstance(child, Container):
                yield from child.traverse()

    def _add_child(self, child: Resource) -> None:
        self._children.append(child)

    def _remove_child(self, child: Resource) -> bool:
        for i, existing in enumerate(self._children):
            if existing is child:
                del self._children[i]
                return True
        return False


class Resource:
    """A file, folder or project backed by a storage entry."""

    kind: ResourceKind

    def __init__(self, parent: Container, entry: Entry):
        self._parent_ref: Optional[weakref.ref] = weakref.ref(parent)
        self._entry = entry

    @property
    def name(self) -> str:
        return self._entry.name

    @property
    def entry(self) -> Entry:
        return self._entry

    @property
    def parent(self) -> Optional[Container]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def project(self) -> Optional[Project]:
        """The containing Project, or None for loose files and detached resources."""
        parent = self.parent
        return None if parent is None else parent.project

    @property
    def workspace(self) -> Optional[Workspace]:
        node = self.parent
        while isinstance(node, Resource):
            node = node.parent
        return node

    @property
    def path(self) -> str:
        """Names from the top-level resource down to this one."""
        parts = [self.name]
        node = self.parent
        while isinstance(node, Resource):
            parts.append(node.name)
            node = node.parent
        return "/".join(reversed(parts))

    def _detach(self) -> None:
        self._parent_ref = None

    def _require_workspace(self) -> Workspace:
        workspace = self.workspace
        if workspace is None:
            raise ResourceNotLinkedError(f"Resource is not linked into a workspace: {self.path}")
        return workspace

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"


class Folder(Resource, Container):
    """A directory-backed container."""

    kind = ResourceKind.FOLDER

    def __init__(self, parent: Container, entry: Entry):
        Resource.__init__(self, parent, entry)
        Container.__init__(self)


class Project(Folder):
    """A folder designated as a project root."""

    kind = ResourceKind.PROJECT

    @property
    def project(self) -> Project:
        return self


class File(Resource):
    """A leaf resource with text contents."""

    kind = ResourceKind.FILE

    async def get_contents(self) -> str:
        workspace = self._require_workspace()
        return await workspace.storage.read_text(self._entry)

    async def set_contents(self, contents: str) -> None:
        """Write new contents and broadcast a CHANGE event once written."""
        workspace = self._require_workspace()
        await workspace.storage.write_text(self._entry, contents)
        workspace.notify(self, ResourceEventType.CHANGE)
