"""Shared data models for rewatch_core."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ChangeKind(Enum):
    """Kinds of native filesystem changes that can trigger a run."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """One classified native notification."""

    kind: ChangeKind
    """What happened."""

    paths: tuple[Path, ...]
    """Affected paths (two for a rename: source and destination)."""


@dataclass(frozen=True)
class Trigger:
    """Signal that at least one relevant change happened in a debounce window.

    The controller re-runs on any Trigger; the fields are for display only.
    """

    path: Path | None = None
    """First non-ignored path of the batch."""

    event_count: int = 0
    """Number of raw events coalesced into this trigger."""


@dataclass(frozen=True)
class RunOutcome:
    """Result of one command invocation."""

    command: str
    """Command line that was run."""

    returncode: int
    """Child exit status (negative for a signal on POSIX)."""

    duration: float = 0.0
    """Wall-clock seconds from launch to exit."""

    @property
    def success(self) -> bool:
        """True if the child exited with status 0."""
        return self.returncode == 0


class WatchState(Enum):
    """Controller lifecycle states."""

    IDLE = "idle"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


@dataclass
class WatchSummary:
    """Startup details reported once the watch set is known."""

    file_count: int = 0
    """Number of files in the watch set."""

    paths: list[str] = field(default_factory=list)
    """Paths as the user supplied them."""
