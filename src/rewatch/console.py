"""Console notifier: the status lines printed around command runs."""

from pathlib import Path

from rich.console import Console

from rewatch_core.models import RunOutcome, WatchSummary


class ConsoleNotifier:
    """Prints watch status with rich.

    Status lines go to stdout between the child's own output; failures go to
    stderr. User-supplied text (paths, commands) is printed without markup.
    """

    def __init__(self, console: Console | None = None, error_console: Console | None = None):
        """Initialize notifier.

        Args:
            console: Console for status lines (defaults to stdout)
            error_console: Console for failures (defaults to stderr)
        """
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)

    def _say(self, text: str, style: str | None = None, console: Console | None = None) -> None:
        (console or self.console).print(text, style=style, markup=False, soft_wrap=True)

    def watching(self, summary: WatchSummary) -> None:
        self._say(f"rewatch is watching about {summary.file_count} files:", style="bold")
        self._say(" ".join(summary.paths), style="dim")

    def file_changed(self, path: Path | None) -> None:
        self._say(f"{path} changed" if path else "Watched files changed", style="cyan")

    def run_started(self, command: str) -> None:
        self._say("FIGHT!", style="bold yellow")
        self._say(command)

    def run_finished(self, outcome: RunOutcome) -> None:
        if outcome.success:
            self._say("CONTINUE?", style="bold green")
            return

        self._say(f"Command exited with status: {outcome.returncode}", style="red", console=self.error_console)
        self._say("CONTINUE?", style="bold red")

    def launch_failed(self, command: str, error: Exception) -> None:
        self._say(f"Error executing command: {error}", style="bold red", console=self.error_console)
        self._say("CONTINUE?", style="bold red")

    def shutdown(self) -> None:
        self._say("GAMEOVER", style="bold magenta")
