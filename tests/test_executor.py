"""Tests for rewatch_core.executor."""

import sys
from unittest.mock import patch

import pytest

from rewatch_core.executor import CommandLaunchError, execute_command


class TestExecuteCommand:
    """Test cases for execute_command."""

    @pytest.mark.asyncio
    async def test_successful_command(self):
        outcome = await execute_command("exit 0")

        assert outcome.success is True
        assert outcome.returncode == 0
        assert outcome.command == "exit 0"
        assert outcome.duration >= 0

    @pytest.mark.asyncio
    async def test_failing_command_is_not_an_error(self):
        """A non-zero exit is reported in the outcome, not raised."""
        outcome = await execute_command("exit 3")

        assert outcome.success is False
        assert outcome.returncode == 3

    @pytest.mark.asyncio
    async def test_output_goes_to_inherited_stdout(self, capfd):
        """The child writes straight to our stdout."""
        await execute_command("echo visible-output")

        captured = capfd.readouterr()
        assert "visible-output" in captured.out

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell syntax")
    async def test_shell_features_work(self, tmp_path):
        """Pipes and redirections are interpreted by the shell."""
        out = tmp_path / "out.txt"

        outcome = await execute_command(f"echo hello | tr a-z A-Z > '{out}'")

        assert outcome.success is True
        assert out.read_text().strip() == "HELLO"

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell syntax")
    async def test_stderr_is_inherited(self, capfd):
        await execute_command("echo oops 1>&2")

        captured = capfd.readouterr()
        assert "oops" in captured.err

    @pytest.mark.asyncio
    async def test_launch_failure_raises(self):
        """A shell that cannot be started surfaces as CommandLaunchError."""
        with patch(
            "rewatch_core.executor.asyncio.create_subprocess_shell",
            side_effect=FileNotFoundError("/bin/sh"),
        ):
            with pytest.raises(CommandLaunchError) as exc_info:
                await execute_command("make")

        assert exc_info.value.command == "make"
        assert isinstance(exc_info.value.reason, FileNotFoundError)
