"""Watch loop controller: scan, watch, run, repeat. Primary embed point."""

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from rewatch_core.executor import CommandLaunchError, execute_command
from rewatch_core.file_watcher import ChangeWatcher
from rewatch_core.filter import DEFAULT_FILTER, IgnoreFilter
from rewatch_core.models import RunOutcome, Trigger, WatchState, WatchSummary
from rewatch_core.notifier import NoOpNotifier, WatchNotifier
from rewatch_core.scanner import gather_files
from rewatch_core.watchers import DEBOUNCE_MS, TRIGGER_QUEUE_SIZE, TriggerSourceWatcher, WatcherConfig

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class NothingToWatchError(RuntimeError):
    """The initial scan produced no files to watch."""


class RewatchController:
    """Runs a command once at startup and again after every debounced change.

    Stable API: prepare(), run(), request_stop(), state, files, watched_count,
    last_outcome. Runs are strictly sequential: a trigger that arrives during a
    run waits in the watcher's queue, and a stop request is honored only
    between runs.
    """

    def __init__(
        self,
        command: str,
        paths: Sequence[str | Path],
        notifier: WatchNotifier | None = None,
        ignore_filter: IgnoreFilter | None = None,
        debounce_ms: int = DEBOUNCE_MS,
        queue_size: int = TRIGGER_QUEUE_SIZE,
        executor: Callable[[str], Awaitable[RunOutcome]] = execute_command,
        watcher_factory: Callable[..., TriggerSourceWatcher] = ChangeWatcher,
        handle_signals: bool = True,
    ):
        """Initialize controller.

        Args:
            command: Shell command to run
            paths: Files or directories to watch, as supplied by the user
            notifier: Optional status handler (defaults to NoOpNotifier - silent)
            ignore_filter: Filter shared by scanning and watching
            debounce_ms: Debounce window for change batches
            queue_size: Capacity of the trigger queue
            executor: Coroutine function running one command
            watcher_factory: Builds the watcher from (config, ignore_filter, loop)
            handle_signals: If True, SIGINT/SIGTERM request a stop while run() is active
        """
        self.command = command
        self.paths = [str(p) for p in paths]
        self.notifier = notifier or NoOpNotifier()
        self.ignore_filter = ignore_filter or DEFAULT_FILTER
        self.debounce_ms = debounce_ms
        self.queue_size = queue_size
        self.handle_signals = handle_signals
        self._executor = executor
        self._watcher_factory = watcher_factory

        self.state = WatchState.IDLE
        self.files: list[Path] = []
        self.run_count = 0
        self.last_outcome: RunOutcome | None = None

        self._loop: asyncio.AbstractEventLoop | None = None
        self._watcher: TriggerSourceWatcher | None = None
        self._stop_event = asyncio.Event()
        self._loop_signals: list[signal.Signals] = []
        self._previous_handlers: dict[signal.Signals, object] = {}

    @property
    def watched_count(self) -> int:
        """Number of files in the watch set."""
        return len(self.files)

    def prepare(self) -> list[Path]:
        """Scan the input paths and report the watch set.

        Returns:
            Files to watch

        Raises:
            NothingToWatchError: If no files remain after filtering
            ScanError: If an existing directory cannot be read
        """
        self.files = gather_files(self.paths, self.ignore_filter)
        if not self.files:
            raise NothingToWatchError("No files to monitor")

        self.notifier.watching(WatchSummary(file_count=len(self.files), paths=list(self.paths)))
        return self.files

    async def run(self) -> int:
        """Scan, start watching, run once, then re-run on every trigger until stopped.

        Returns:
            Process exit code (0 after a requested stop)

        Raises:
            NothingToWatchError: If the scan finds nothing to watch
            ScanError: If scanning fails
            WatchSetupError: If a primary watch cannot be registered
        """
        if self._loop is not None:
            raise RuntimeError("Controller is already running")

        if not self.files:
            self.prepare()

        self._loop = asyncio.get_running_loop()
        config = WatcherConfig(
            paths=tuple(self.files),
            debounce_ms=self.debounce_ms,
            queue_size=self.queue_size,
        )
        self._watcher = self._watcher_factory(config, self.ignore_filter, self._loop)

        try:
            self._watcher.start()
        except Exception:
            self._watcher = None
            self._loop = None
            raise

        self._install_signal_handlers()
        try:
            # Startup run does not wait for a change
            await self._run_command()

            while True:
                trigger = await self._next_trigger()
                if trigger is None:
                    break

                self.notifier.file_changed(trigger.path)
                await self._run_command()
        finally:
            self._shutdown()

        return 0

    def request_stop(self) -> None:
        """Ask the loop to stop before the next run (thread- and signal-safe)."""
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._stop_event.set)
        else:
            self._stop_event.set()

    async def _run_command(self) -> RunOutcome | None:
        """Run the command once, reporting launch failures instead of raising."""
        self.state = WatchState.RUNNING
        self.notifier.run_started(self.command)
        try:
            outcome = await self._executor(self.command)
        except CommandLaunchError as e:
            self.notifier.launch_failed(self.command, e)
            return None
        else:
            self.last_outcome = outcome
            self.notifier.run_finished(outcome)
            return outcome
        finally:
            self.run_count += 1
            self.state = WatchState.IDLE

    async def _next_trigger(self) -> Trigger | None:
        """Wait for either the next trigger or a stop request.

        Returns:
            The trigger, or None if a stop was requested
        """
        if self._stop_event.is_set():
            return None

        trigger_task = asyncio.ensure_future(self._watcher.next_trigger())
        stop_task = asyncio.ensure_future(self._stop_event.wait())
        try:
            done, _ = await asyncio.wait({trigger_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (trigger_task, stop_task):
                if not task.done():
                    task.cancel()

        # Stop wins a tie
        if stop_task in done:
            return None
        return trigger_task.result()

    def _shutdown(self) -> None:
        """Stop watching and release signal handlers."""
        self.state = WatchState.SHUTTING_DOWN
        self._remove_signal_handlers()

        if self._watcher is not None:
            try:
                self._watcher.stop()
            except Exception as e:
                logger.error(f"Error stopping change watcher: {e}")
            self._watcher = None

        self.notifier.shutdown()
        self._loop = None
        self.state = WatchState.TERMINATED

    def _install_signal_handlers(self) -> None:
        """Route SIGINT/SIGTERM to request_stop() for the duration of run()."""
        if not self.handle_signals:
            return

        for sig in STOP_SIGNALS:
            try:
                self._loop.add_signal_handler(sig, self.request_stop)
                self._loop_signals.append(sig)
            except NotImplementedError:
                # Event loops without signal support (Windows)
                try:
                    self._previous_handlers[sig] = signal.signal(sig, lambda signum, frame: self.request_stop())
                except ValueError as e:
                    logger.debug(f"Cannot handle {sig.name}: {e}")
            except (RuntimeError, ValueError) as e:
                logger.debug(f"Cannot handle {sig.name}: {e}")

    def _remove_signal_handlers(self) -> None:
        for sig in self._loop_signals:
            self._loop.remove_signal_handler(sig)
        self._loop_signals.clear()

        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._previous_handlers.clear()
