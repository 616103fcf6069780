"""Change watcher implementation using watchdog."""

import asyncio
import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from rewatch_core.filter import DEFAULT_FILTER, IgnoreFilter
from rewatch_core.models import ChangeEvent, ChangeKind, Trigger
from rewatch_core.watchers import WatcherConfig

logger = logging.getLogger(__name__)

# Renames count as modifications of both endpoints
_KIND_BY_EVENT_TYPE = {
    EVENT_TYPE_CREATED: ChangeKind.CREATED,
    EVENT_TYPE_MODIFIED: ChangeKind.MODIFIED,
    EVENT_TYPE_MOVED: ChangeKind.MODIFIED,
    EVENT_TYPE_DELETED: ChangeKind.REMOVED,
}


class WatchSetupError(RuntimeError):
    """A primary watch registration failed."""

    def __init__(self, path: Path, reason: Exception):
        super().__init__(f"Failed to watch path {path}: {reason}")
        self.path = path
        self.reason = reason


def classify_event(event: FileSystemEvent) -> ChangeEvent | None:
    """Map a watchdog event to a ChangeEvent.

    Args:
        event: Raw watchdog event

    Returns:
        ChangeEvent, or None for kinds that never trigger a run (opened,
        closed, directory mtime updates)
    """
    kind = _KIND_BY_EVENT_TYPE.get(event.event_type)
    if kind is None:
        return None

    # A directory "modified" event accompanies every change inside it
    if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
        return None

    paths = [Path(os.fsdecode(event.src_path))]
    dest_path = getattr(event, "dest_path", "")
    if event.event_type == EVENT_TYPE_MOVED and dest_path:
        paths.append(Path(os.fsdecode(dest_path)))

    return ChangeEvent(kind=kind, paths=tuple(paths))


def first_relevant_path(batch: Iterable[ChangeEvent], ignore_filter: IgnoreFilter) -> Path | None:
    """Return the first path in a batch the filter does not ignore."""
    for change in batch:
        for path in change.paths:
            if not ignore_filter.should_ignore(path):
                return path
    return None


class _DebouncedHandler(FileSystemEventHandler):
    """Buffers classified events and flushes them as one batch after a quiet period."""

    def __init__(
        self,
        on_batch: Callable[[list[ChangeEvent]], None],
        debounce_ms: int,
        max_wait_ms: int | None = None,
    ):
        """Initialize handler.

        Args:
            on_batch: Called from the timer thread with each flushed batch
            debounce_ms: Quiet period in milliseconds
            max_wait_ms: Upper bound on how long a batch may stay open
        """
        super().__init__()
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms
        self.max_wait_ms = max_wait_ms
        self._pending: list[ChangeEvent] = []
        self._batch_started: float | None = None
        self._generation = 0
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Classify every native event and buffer the relevant ones."""
        try:
            change = classify_event(event)
        except Exception as e:
            logger.exception(f"Failed to classify {event.event_type} event: {e}")
            return

        if change is None:
            logger.debug(f"Discarding {event.event_type} event: {event.src_path}")
            return

        self.add(change)

    def add(self, change: ChangeEvent) -> None:
        """Buffer a change and (re)arm the debounce timer."""
        with self._lock:
            now = time.monotonic()
            if not self._pending:
                self._batch_started = now
            self._pending.append(change)

            delay = self.debounce_ms / 1000.0
            if self.max_wait_ms is not None and self._batch_started is not None:
                deadline = self._batch_started + self.max_wait_ms / 1000.0
                delay = max(0.0, min(delay, deadline - now))

            # A timer already running _flush() must not steal the new event
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(delay, self._flush, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _flush(self, generation: int) -> None:
        """Hand the buffered batch to on_batch if no newer event re-armed the timer."""
        with self._lock:
            if generation != self._generation or not self._pending:
                return
            batch = self._pending
            self._pending = []
            self._batch_started = None
            self._timer = None

        logger.debug(f"Debounce window closed with {len(batch)} event(s)")
        try:
            self.on_batch(batch)
        except Exception as e:
            logger.exception(f"Failed to deliver change batch: {e}")

    def cancel(self) -> None:
        """Drop buffered events and disarm the timer."""
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = []
            self._batch_started = None

    @property
    def pending_count(self) -> int:
        """Number of buffered events in the open batch."""
        with self._lock:
            return len(self._pending)


class ChangeWatcher:
    """Watches the watch set and delivers debounced triggers through an asyncio queue.

    Native events arrive on watchdog's observer thread and are debounced on a
    timer thread; each batch containing a non-ignored path becomes one Trigger
    pushed onto the queue via ``call_soon_threadsafe``. The event loop side is
    the only consumer.
    """

    def __init__(
        self,
        config: WatcherConfig,
        ignore_filter: IgnoreFilter | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        """Initialize watcher.

        Args:
            config: Watch set and debounce settings
            ignore_filter: Filter applied to every batch (defaults to the built-in list)
            loop: Event loop that consumes triggers (defaults to the running loop at start())
            observer_factory: Creates the watchdog observer
        """
        self.config = config
        self.ignore_filter = ignore_filter or DEFAULT_FILTER
        self.loop = loop
        self._observer_factory = observer_factory
        self._observer: Observer | None = None
        self._queue: asyncio.Queue[Trigger] = asyncio.Queue(maxsize=config.queue_size)
        self.handler = _DebouncedHandler(
            self._on_batch,
            debounce_ms=config.debounce_ms,
            max_wait_ms=config.max_wait_ms,
        )
        self.watches: list[tuple[Path, bool]] = []
        """Native registrations made so far as (path, recursive)."""

    @property
    def watch_count(self) -> int:
        """Number of paths in the watch set."""
        return len(self.config.paths)

    @property
    def pending_triggers(self) -> int:
        """Triggers queued but not yet consumed."""
        return self._queue.qsize()

    def is_running(self) -> bool:
        """Check if the observer is running."""
        return self._observer is not None

    def start(self) -> None:
        """Start the observer and register every path in the watch set.

        Raises:
            RuntimeError: If already started, or no loop was given and none is running
            WatchSetupError: If a primary registration fails
        """
        if self._observer is not None:
            raise RuntimeError("Watcher is already running")

        if self.loop is None:
            self.loop = asyncio.get_running_loop()

        # Scheduling on a live observer starts each emitter immediately, so
        # registration errors surface per path
        self._observer = self._observer_factory()
        self._observer.start()

        try:
            self._register_watch_set()
        except WatchSetupError:
            self.stop()
            raise

        logger.info(
            f"Started change watcher: {self.watch_count} path(s), "
            f"{len(self.watches)} native watch(es), debounce {self.config.debounce_ms}ms"
        )

    def _register_watch_set(self) -> None:
        """Register directories recursively and files together with their parent directory."""
        recursive_roots: list[Path] = []
        watched_dirs: set[Path] = set()

        for path in self.config.paths:
            if path.is_dir():
                self._schedule(path, recursive=True)
                recursive_roots.append(path)

        for path in self.config.paths:
            if path.is_dir():
                continue

            # Already observed through a directory watch
            if path.parent in watched_dirs or any(path.is_relative_to(root) for root in recursive_roots):
                continue

            self._schedule(path, recursive=False)

            # Catches rename-over-replace edits that detach the file watch
            try:
                self._schedule(path.parent, recursive=False)
                watched_dirs.add(path.parent)
            except WatchSetupError as e:
                logger.warning(f"Could not watch parent directory {path.parent}: {e.reason}")

    def _schedule(self, path: Path, recursive: bool) -> None:
        """Register one native watch."""
        try:
            self._observer.schedule(self.handler, str(path), recursive=recursive)
        except OSError as e:
            raise WatchSetupError(path, e) from e

        self.watches.append((path, recursive))
        logger.debug(f"Watching {path} ({'recursive' if recursive else 'non-recursive'})")

    def _on_batch(self, batch: list[ChangeEvent]) -> None:
        """Turn a flushed batch into at most one trigger (runs on the timer thread)."""
        path = first_relevant_path(batch, self.ignore_filter)
        if path is None:
            logger.debug(f"Ignoring batch of {len(batch)} event(s) on ignored paths only")
            return

        trigger = Trigger(path=path, event_count=len(batch))
        try:
            self.loop.call_soon_threadsafe(self._offer, trigger)
        except RuntimeError:
            logger.debug(f"Event loop closed, dropping trigger for {path}")

    def _offer(self, trigger: Trigger) -> None:
        """Enqueue a trigger on the loop thread, dropping it if the queue is full."""
        try:
            self._queue.put_nowait(trigger)
        except asyncio.QueueFull:
            logger.debug(f"Trigger queue full ({self._queue.maxsize}), dropping trigger for {trigger.path}")

    async def next_trigger(self) -> Trigger:
        """Wait for the next trigger."""
        return await self._queue.get()

    def stop(self) -> None:
        """Stop the observer and discard any open batch."""
        self.handler.cancel()

        if self._observer is None:
            return

        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join(timeout=2.0)
        self._observer = None
        logger.info("Stopped change watcher")
