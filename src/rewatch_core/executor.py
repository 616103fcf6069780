"""Run the configured command through the platform shell."""

import asyncio
import logging
import time

from rewatch_core.models import RunOutcome

logger = logging.getLogger(__name__)


class CommandLaunchError(RuntimeError):
    """The shell could not be started for a command."""

    def __init__(self, command: str, reason: OSError):
        super().__init__(f"Failed to launch command {command!r}: {reason}")
        self.command = command
        self.reason = reason


async def execute_command(command: str) -> RunOutcome:
    """Run a command and wait for it to exit.

    The command goes through the platform shell (``/bin/sh -c`` on POSIX,
    ``cmd.exe /c`` on Windows), so pipes and globs work. The child inherits
    this process's stdout and stderr so its output appears in real time.

    Args:
        command: Shell command line

    Returns:
        RunOutcome with the child's exit status

    Raises:
        CommandLaunchError: If the shell could not be started
    """
    started = time.monotonic()

    try:
        process = await asyncio.create_subprocess_shell(command)
    except OSError as e:
        logger.debug(f"Failed to launch {command!r}: {e}")
        raise CommandLaunchError(command, e) from e

    logger.debug(f"Started pid {process.pid}: {command}")
    returncode = await process.wait()
    outcome = RunOutcome(command=command, returncode=returncode, duration=time.monotonic() - started)

    if outcome.success:
        logger.info(f"Command finished in {outcome.duration:.2f}s")
    else:
        logger.info(f"Command exited with status {returncode} after {outcome.duration:.2f}s")

    return outcome
