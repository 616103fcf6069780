"""Pytest configuration and fixtures."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from rewatch_core.filter import IgnoreFilter  # noqa: E402
from rewatch_core.models import RunOutcome, Trigger  # noqa: E402


class RecordingNotifier:
    """Notifier that records every call as (name, payload)."""

    def __init__(self):
        self.events: list[tuple[str, object]] = []

    def watching(self, summary):
        self.events.append(("watching", summary))

    def file_changed(self, path):
        self.events.append(("file_changed", path))

    def run_started(self, command):
        self.events.append(("run_started", command))

    def run_finished(self, outcome):
        self.events.append(("run_finished", outcome))

    def launch_failed(self, command, error):
        self.events.append(("launch_failed", error))

    def shutdown(self):
        self.events.append(("shutdown", None))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FakeWatcher:
    """In-memory watcher: tests push triggers with fire()."""

    def __init__(self, config, ignore_filter, loop):
        self.config = config
        self.ignore_filter = ignore_filter
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue()
        self.started = False
        self.stopped = False

    @property
    def watch_count(self) -> int:
        return len(self.config.paths)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    async def next_trigger(self):
        return await self.queue.get()

    def fire(self, path: str | Path = "changed.py"):
        self.queue.put_nowait(Trigger(path=Path(path), event_count=1))


class FakeExecutor:
    """Executor stand-in that tracks concurrency; blocks on `release` when set."""

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self.completed = 0
        self.release: asyncio.Event | None = None

    async def __call__(self, command: str) -> RunOutcome:
        self.calls.append(command)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.release is not None:
                await self.release.wait()
            else:
                await asyncio.sleep(0.01)
        finally:
            self.active -= 1
        self.completed += 1
        return RunOutcome(command=command, returncode=self.returncode)


async def wait_until(predicate, timeout: float = 3.0) -> None:
    """Poll until predicate() is true or fail after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Timed out waiting for condition")
        await asyncio.sleep(0.01)


@pytest.fixture
def notifier():
    """Create a recording notifier."""
    return RecordingNotifier()


@pytest.fixture
def ignore_filter():
    """Create the default ignore filter."""
    return IgnoreFilter()


@pytest.fixture
def executor():
    """Create a fake executor."""
    return FakeExecutor()


@pytest.fixture
def watchers():
    """Factory building FakeWatcher instances; created ones are kept on .created."""
    created: list[FakeWatcher] = []

    def factory(config, ignore_filter, loop):
        watcher = FakeWatcher(config, ignore_filter, loop)
        created.append(watcher)
        return watcher

    factory.created = created
    return factory


@pytest.fixture
def source_tree(tmp_path):
    """Create a small project tree: one root file plus nested subdirectories."""
    root = tmp_path / "project"
    (root / "pkg" / "sub").mkdir(parents=True)
    (root / "root.py").write_text("# root")
    (root / "pkg" / "mod.py").write_text("# mod")
    (root / "pkg" / "sub" / "deep.py").write_text("# deep")
    return root
