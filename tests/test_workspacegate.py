"""
Tests for the WorkspaceGate resource tree.
"""

import asyncio
import json
import pytest

from spark.PreferenceGate import WORKSPACE_ROOTS_KEY, MemoryPreferenceStore
from spark.StorageGate import MemoryStorageProvider, StorageError
from spark.WorkspaceGate import (
    File,
    Folder,
    Project,
    ResourceChangeEvent,
    ResourceEventType,
    ResourceKind,
    ResourceNotLinkedError,
    Workspace,
)


def drain(queue: asyncio.Queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


class FailingStorage(MemoryStorageProvider):
    """Memory storage whose listing of one directory fails."""

    def __init__(self, failing_path: str):
        super().__init__()
        self.failing_path = failing_path

    async def list_children(self, directory):
        children = await super().list_children(directory)
        if directory.full_path == self.failing_path:
            raise StorageError(f"Listing failed: {directory.full_path}")
        return children


class TestLinking:
    """Tests for Workspace.link and recursive population."""

    @pytest.mark.asyncio
    async def test_files_keep_call_order(self, preferences):
        storage = MemoryStorageProvider()
        entries = [storage.make_file(f"/{name}.txt") for name in ("c", "a", "b")]
        workspace = Workspace(preferences, storage)

        linked = [await workspace.link(entry) for entry in entries]

        assert workspace.get_files() == linked
        assert [f.name for f in workspace.get_files()] == ["c.txt", "a.txt", "b.txt"]
        assert workspace.get_projects() == []
        assert all(isinstance(f, File) for f in linked)

    @pytest.mark.asyncio
    async def test_directory_becomes_populated_project(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))

        assert isinstance(project, Project)
        assert project.kind is ResourceKind.PROJECT
        assert workspace.get_projects() == [project]
        assert [c.name for c in project.get_children()] == ["main.dart", "lib", "web"]

        lib = project.get_child("lib")
        assert isinstance(lib, Folder)
        assert [c.name for c in lib.get_children()] == ["util.dart", "src"]
        assert lib.get_child("src").get_children() == []

    @pytest.mark.asyncio
    async def test_one_add_event_per_link(self, workspace, memory_storage):
        events = workspace.subscribe()

        project = await workspace.link(memory_storage.make_directory("/demo"))
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))

        received = drain(events)
        assert [e.type for e in received] == [ResourceEventType.ADD, ResourceEventType.ADD]
        assert received[0].resource is project
        assert received[1].resource is loose

    @pytest.mark.asyncio
    async def test_add_is_published_before_population_finishes(self, workspace, memory_storage):
        events = workspace.subscribe()

        task = asyncio.create_task(workspace.link(memory_storage.make_directory("/demo")))
        await asyncio.sleep(0)

        assert not task.done()
        event = events.get_nowait()
        assert event.type is ResourceEventType.ADD
        assert event.resource.get_children() == []

        project = await task
        assert event.resource is project
        assert events.empty()

    @pytest.mark.asyncio
    async def test_project_resolution(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))
        lib = project.get_child("lib")
        util = lib.get_child("util.dart")
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))

        assert project.project is project
        assert lib.project is project
        assert util.project is project
        assert loose.project is None
        assert workspace.project is None

    @pytest.mark.asyncio
    async def test_parents_and_paths(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        util = project.get_child("lib").get_child("util.dart")

        assert loose.parent is workspace
        assert project.parent is workspace
        assert workspace.parent is None
        assert workspace.name is None
        assert util.path == "demo/lib/util.dart"
        assert util.workspace is workspace

    @pytest.mark.asyncio
    async def test_queries_do_not_recurse(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))

        assert workspace.get_children() == [project]
        assert workspace.get_files() == []
        assert [r.name for r in project.traverse()] == [
            "main.dart", "lib", "util.dart", "src", "web", "index.html",
        ]

    @pytest.mark.asyncio
    async def test_population_failure_keeps_project_attached(self, preferences):
        storage = FailingStorage("/demo/web")
        storage.make_file("/demo/main.dart")
        storage.make_file("/demo/lib/util.dart")
        storage.make_file("/demo/web/index.html")
        workspace = Workspace(preferences, storage)
        events = workspace.subscribe()

        with pytest.raises(StorageError, match="/demo/web"):
            await workspace.link(storage.make_directory("/demo"))

        [project] = workspace.get_projects()
        assert [c.name for c in project.get_children()] == ["main.dart", "lib", "web"]
        assert project.get_child("web").get_children() == []
        assert [e.type for e in drain(events)] == [ResourceEventType.ADD]

    @pytest.mark.asyncio
    async def test_root_listing_failure(self, preferences):
        storage = FailingStorage("/demo")
        storage.make_file("/demo/main.dart")
        workspace = Workspace(preferences, storage)

        with pytest.raises(StorageError):
            await workspace.link(storage.make_directory("/demo"))

        assert workspace.get_projects()[0].get_children() == []

    @pytest.mark.asyncio
    async def test_failure_waits_for_sibling_subtrees(self, preferences):
        storage = FailingStorage("/demo/bad")
        storage.make_file("/demo/bad/x.txt")
        storage.make_file("/demo/deep/a/b/c/d/e/f.txt")
        workspace = Workspace(preferences, storage)

        with pytest.raises(StorageError, match="/demo/bad"):
            await workspace.link(storage.make_directory("/demo"))

        [project] = workspace.get_projects()
        count = len(list(project.traverse()))
        for _ in range(20):
            await asyncio.sleep(0)

        assert len(list(project.traverse())) == count
        assert "f.txt" in [r.name for r in project.traverse()]


class TestUnlink:
    """Tests for Workspace.unlink."""

    @pytest.mark.asyncio
    async def test_unlink_project(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))
        main = project.get_child("main.dart")
        events = workspace.subscribe()

        workspace.unlink(project)

        assert workspace.get_projects() == []
        assert project.parent is None
        assert project.workspace is None
        assert main.workspace is None
        [event] = drain(events)
        assert event.type is ResourceEventType.DELETE
        assert event.resource is project
        assert memory_storage.exists("/demo")

    @pytest.mark.asyncio
    async def test_unlink_nested_folder(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))
        lib = project.get_child("lib")
        events = workspace.subscribe()

        workspace.unlink(lib)

        assert [c.name for c in project.get_children()] == ["main.dart", "web"]
        assert lib.project is None
        assert len(drain(events)) == 1

    @pytest.mark.asyncio
    async def test_unlink_twice_fails(self, workspace, memory_storage):
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        workspace.unlink(loose)

        with pytest.raises(ResourceNotLinkedError):
            workspace.unlink(loose)

    @pytest.mark.asyncio
    async def test_unlink_from_other_workspace_fails(self, workspace, memory_storage):
        other = Workspace(MemoryPreferenceStore(), memory_storage)
        loose = await other.link(memory_storage.make_file("/notes.txt", "loose"))

        with pytest.raises(ResourceNotLinkedError):
            workspace.unlink(loose)

        assert other.get_files() == [loose]


class TestFileContents:
    """Tests for File read/write through the workspace."""

    @pytest.mark.asyncio
    async def test_get_contents(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))

        assert await project.get_child("main.dart").get_contents() == "void main() {}"

    @pytest.mark.asyncio
    async def test_set_contents_publishes_change(self, workspace, memory_storage):
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        events = workspace.subscribe()

        await loose.set_contents("edited")

        [event] = drain(events)
        assert event.type is ResourceEventType.CHANGE
        assert event.resource is loose
        assert await memory_storage.read_text(loose.entry) == "edited"

    @pytest.mark.asyncio
    async def test_detached_file_cannot_be_read(self, workspace, memory_storage):
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        workspace.unlink(loose)
        events = workspace.subscribe()

        with pytest.raises(ResourceNotLinkedError):
            await loose.set_contents("lost")
        with pytest.raises(ResourceNotLinkedError):
            await loose.get_contents()

        assert events.empty()


class TestEvents:
    """Tests for the workspace change stream."""

    @pytest.mark.asyncio
    async def test_event_to_dict(self, workspace, memory_storage):
        project = await workspace.link(memory_storage.make_directory("/demo"))
        util = project.get_child("lib").get_child("util.dart")

        data = ResourceChangeEvent(util, ResourceEventType.CHANGE).to_dict()

        assert data == {"type": "CHANGE", "kind": "file", "name": "util.dart", "path": "demo/lib/util.dart"}

    def test_event_type_str(self):
        assert str(ResourceEventType.DELETE) == "DELETE"

    @pytest.mark.asyncio
    async def test_every_subscriber_sees_events(self, workspace, memory_storage):
        first = workspace.subscribe()
        second = workspace.subscribe()

        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))

        assert drain(first)[0].resource is loose
        assert drain(second)[0].resource is loose

    @pytest.mark.asyncio
    async def test_unsubscribe_and_history(self, preferences, memory_storage):
        workspace = Workspace(preferences, memory_storage, max_history=2)
        events = workspace.subscribe()
        workspace.unsubscribe(events)

        for name in ("a", "b", "c"):
            await workspace.link(memory_storage.make_file(f"/{name}.txt"))

        assert events.empty()
        assert [e.resource.name for e in workspace.get_recent()] == ["b.txt", "c.txt"]


class TestPersistence:
    """Tests for Workspace.save and Workspace.initialize."""

    @pytest.mark.asyncio
    async def test_roots_round_trip(self, preferences, memory_storage):
        workspace = Workspace(preferences, memory_storage)
        await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        await workspace.link(memory_storage.make_directory("/demo"))
        await workspace.save()

        assert len(json.loads(await preferences.get_value(WORKSPACE_ROOTS_KEY))) == 2

        restored = await Workspace(preferences, memory_storage).initialize()

        assert [r.name for r in restored.get_children()] == ["notes.txt", "demo"]
        assert isinstance(restored.get_children()[1], Project)
        assert restored.get_projects()[0].get_child("lib") is not None
        assert restored.initialized is True

    @pytest.mark.asyncio
    async def test_stale_roots_are_skipped(self, preferences, memory_storage):
        workspace = Workspace(preferences, memory_storage)
        loose = await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        await workspace.link(memory_storage.make_directory("/demo"))
        await workspace.save()
        memory_storage.delete(loose.entry)

        restored = await Workspace(preferences, memory_storage).initialize()

        assert [r.name for r in restored.get_children()] == ["demo"]

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, preferences, memory_storage):
        workspace = Workspace(preferences, memory_storage)
        await workspace.link(memory_storage.make_file("/notes.txt", "loose"))
        await workspace.save()

        restored = Workspace(preferences, memory_storage)
        await restored.initialize()
        await restored.initialize()

        assert len(restored.get_children()) == 1

    @pytest.mark.asyncio
    async def test_failed_initialize_can_be_retried(self, preferences):
        storage = FailingStorage(None)
        storage.make_file("/p1/a.txt")
        storage.make_file("/p2/b.txt")
        workspace = Workspace(preferences, storage)
        await workspace.link(storage.make_directory("/p1"))
        await workspace.link(storage.make_directory("/p2"))
        await workspace.save()

        restored = Workspace(preferences, storage)
        events = restored.subscribe()
        storage.failing_path = "/p2"
        with pytest.raises(StorageError, match="/p2"):
            await restored.initialize()

        assert restored.get_children() == []
        assert restored.initialized is False
        assert [e.type for e in drain(events)].count(ResourceEventType.DELETE) == 2

        storage.failing_path = None
        await restored.initialize()

        assert [r.name for r in restored.get_children()] == ["p1", "p2"]
        assert restored.initialized is True

    @pytest.mark.asyncio
    async def test_malformed_roots_preference(self, memory_storage):
        preferences = MemoryPreferenceStore({WORKSPACE_ROOTS_KEY: "{oops"})

        workspace = await Workspace(preferences, memory_storage).initialize()

        assert workspace.get_children() == []
        assert workspace.initialized is True

    @pytest.mark.asyncio
    async def test_health_status(self, workspace, memory_storage):
        await workspace.link(memory_storage.make_directory("/demo"))
        status = workspace.get_health_status()

        assert status["gate"] == "WorkspaceGate"
        assert status["healthy"] is False
        assert status["details"]["projects"] == 1

        await workspace.initialize()
        assert workspace.get_health_status()["healthy"] is True
