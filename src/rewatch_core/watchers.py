"""Watcher configuration and the protocol trigger sources implement."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from rewatch_core.models import Trigger

DEBOUNCE_MS = 500
MAX_WAIT_MS = 2000
TRIGGER_QUEUE_SIZE = 8


@dataclass(frozen=True)
class WatcherConfig:
    """Configuration for a change watcher."""

    paths: tuple[Path, ...]
    """Watch set: absolute files and/or directories."""

    debounce_ms: int = DEBOUNCE_MS
    """Quiet period that closes a batch of raw events."""

    max_wait_ms: int | None = MAX_WAIT_MS
    """Longest a batch may stay open under continuous activity (None = unbounded)."""

    queue_size: int = TRIGGER_QUEUE_SIZE
    """Capacity of the trigger channel; newer triggers are dropped when full."""

    def __post_init__(self):
        if self.debounce_ms <= 0:
            raise ValueError(f"debounce_ms must be positive, got {self.debounce_ms}")
        if self.queue_size <= 0:
            raise ValueError(f"queue_size must be positive, got {self.queue_size}")


class TriggerSourceWatcher(Protocol):
    """Protocol for change watcher implementations."""

    @property
    def watch_count(self) -> int:
        """Number of paths in the watch set."""
        ...

    def start(self) -> None:
        """Register watches and begin delivering triggers."""
        ...

    def stop(self) -> None:
        """Stop watching."""
        ...

    async def next_trigger(self) -> Trigger:
        """Wait for the next trigger."""
        ...
