"""rewatch-core: Frontend-agnostic scan, watch, debounce and execute pipeline."""

__version__ = "0.1.0"

from rewatch_core.executor import CommandLaunchError, execute_command
from rewatch_core.file_watcher import ChangeWatcher, WatchSetupError
from rewatch_core.filter import DEFAULT_IGNORED_EXTENSIONS, IgnoreFilter, should_ignore
from rewatch_core.models import (
    ChangeEvent,
    ChangeKind,
    RunOutcome,
    Trigger,
    WatchState,
    WatchSummary,
)
from rewatch_core.notifier import LoggingNotifier, NoOpNotifier, WatchNotifier
from rewatch_core.scanner import ScanError, gather_files
from rewatch_core.watchers import DEBOUNCE_MS, TriggerSourceWatcher, WatcherConfig

__all__ = [
    "__version__",
    # Filter / scanner
    "IgnoreFilter",
    "DEFAULT_IGNORED_EXTENSIONS",
    "should_ignore",
    "gather_files",
    "ScanError",
    # Watching
    "ChangeWatcher",
    "WatcherConfig",
    "TriggerSourceWatcher",
    "WatchSetupError",
    "DEBOUNCE_MS",
    # Execution
    "execute_command",
    "CommandLaunchError",
    # Models
    "ChangeEvent",
    "ChangeKind",
    "Trigger",
    "RunOutcome",
    "WatchState",
    "WatchSummary",
    # Notifications
    "WatchNotifier",
    "NoOpNotifier",
    "LoggingNotifier",
]
