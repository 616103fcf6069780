"""Pluggable notification protocol for rewatch_core.

Decouples the controller from how status is presented.
Can be replaced with custom handlers for testing, embedding, or a console.
"""

import logging
from pathlib import Path
from typing import Protocol

from rewatch_core.models import RunOutcome, WatchSummary

logger = logging.getLogger(__name__)


class WatchNotifier(Protocol):
    """Protocol for status notifications - host can provide custom implementation."""

    def watching(self, summary: WatchSummary) -> None:
        """Watch set is ready."""
        ...

    def file_changed(self, path: Path | None) -> None:
        """A trigger was received for a change to ``path``."""
        ...

    def run_started(self, command: str) -> None:
        """The command is about to run."""
        ...

    def run_finished(self, outcome: RunOutcome) -> None:
        """The command exited."""
        ...

    def launch_failed(self, command: str, error: Exception) -> None:
        """The command could not be started."""
        ...

    def shutdown(self) -> None:
        """The watch loop is terminating."""
        ...


class NoOpNotifier:
    """Silent no-op notifier - default for embedded mode."""

    def watching(self, summary: WatchSummary) -> None:
        pass

    def file_changed(self, path: Path | None) -> None:
        pass

    def run_started(self, command: str) -> None:
        pass

    def run_finished(self, outcome: RunOutcome) -> None:
        pass

    def launch_failed(self, command: str, error: Exception) -> None:
        pass

    def shutdown(self) -> None:
        pass


class LoggingNotifier:
    """Implementation using stdlib logging - for headless use and debugging."""

    def watching(self, summary: WatchSummary) -> None:
        logger.info(f"Watching {summary.file_count} file(s): {' '.join(summary.paths)}")

    def file_changed(self, path: Path | None) -> None:
        logger.info(f"{path or 'Watched files'} changed")

    def run_started(self, command: str) -> None:
        logger.info(f"Running: {command}")

    def run_finished(self, outcome: RunOutcome) -> None:
        if outcome.success:
            logger.info(f"Finished: {outcome.command}")
        else:
            logger.warning(f"Command exited with status: {outcome.returncode}")

    def launch_failed(self, command: str, error: Exception) -> None:
        logger.error(f"Error executing command: {error}")

    def shutdown(self) -> None:
        logger.info("Stopped watching")
