"""
Pytest configuration and fixtures for Spark tests.
"""

import inspect
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

# Check for pytest-asyncio
try:
    import pytest_asyncio
    HAS_PYTEST_ASYNCIO = True
except ImportError:
    HAS_PYTEST_ASYNCIO = False

from spark.LocationGate import UserInteraction
from spark.PreferenceGate import MemoryPreferenceStore
from spark.StorageGate import LocalStorageProvider, MemoryStorageProvider
from spark.WorkspaceGate import Workspace


def pytest_collection_modifyitems(config, items):
    """Skip async tests if pytest-asyncio is not installed."""
    if HAS_PYTEST_ASYNCIO:
        return

    skip_asyncio = pytest.mark.skip(
        reason="pytest-asyncio not installed - async tests require pytest-asyncio"
    )
    for item in items:
        if inspect.iscoroutinefunction(item.function):
            item.add_marker(skip_asyncio)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    # Cleanup
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_folder(temp_dir: Path) -> Path:
    """Create a sample storage root with test files."""
    folder = temp_dir / "storage"
    folder.mkdir(parents=True, exist_ok=True)

    (folder / "readme.txt").write_text("Hello World")

    project = folder / "demo"
    project.mkdir()
    (project / "main.dart").write_text("void main() {}")

    subfolder = project / "lib"
    subfolder.mkdir()
    (subfolder / "nested.txt").write_text("Nested content")

    return folder


@pytest.fixture
def local_storage(sample_folder: Path) -> LocalStorageProvider:
    return LocalStorageProvider(str(sample_folder))


@pytest.fixture
def memory_storage() -> MemoryStorageProvider:
    """In-memory storage with a small project and a loose file."""
    storage = MemoryStorageProvider()
    storage.make_file("/notes.txt", "loose")
    storage.make_file("/demo/main.dart", "void main() {}")
    storage.make_file("/demo/lib/util.dart", "int one() => 1;")
    storage.make_directory("/demo/lib/src")
    storage.make_file("/demo/web/index.html", "<html></html>")
    return storage


@pytest.fixture
def preferences() -> MemoryPreferenceStore:
    return MemoryPreferenceStore()


@pytest.fixture
def workspace(preferences, memory_storage) -> Workspace:
    return Workspace(preferences, memory_storage)


class ScriptedInteraction(UserInteraction):
    """Answers dialogs from canned values and records what was asked."""

    def __init__(self, accept: bool = True, directory=None):
        self.accept = accept
        self.directory = directory
        self.confirm_calls = []
        self.pick_calls = []

    async def confirm(self, message, ok_label, title):
        self.confirm_calls.append((message, ok_label, title))
        return self.accept

    async def pick_directory(self, suggested_name):
        self.pick_calls.append(suggested_name)
        return self.directory


@pytest.fixture
def interaction() -> ScriptedInteraction:
    return ScriptedInteraction()


@pytest.fixture(autouse=True)
def reset_module_state():
    """Reset module-level state between tests."""
    yield

    # Reset developer flags
    try:
        from spark.Config.flags import SparkFlags
        SparkFlags.reset()
    except (ImportError, AttributeError):
        pass

    # Reset Config
    try:
        import spark.Config as config_module
        config_module._manager = None
    except (ImportError, AttributeError):
        pass
