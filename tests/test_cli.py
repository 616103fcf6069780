"""Tests for rewatch.cli module."""

import logging
import sys
from unittest.mock import AsyncMock, patch

import pytest

from rewatch import __version__
from rewatch.cli import configure_logging, main, parse_args
from rewatch_core.file_watcher import WatchSetupError
from rewatch_core.scanner import ScanError


class TestParseArgs:
    """Tests for parse_args function."""

    def test_command_and_paths(self):
        with patch.object(sys, "argv", ["rewatch", "make test", "src", "tests"]):
            args = parse_args()

        assert args.command == "make test"
        assert args.paths == ["src", "tests"]
        assert args.verbose is False

    def test_verbose_flag(self):
        args = parse_args(["-v", "make", "src"])
        assert args.verbose is True

    def test_paths_are_required(self, capsys):
        """At least one path must be given."""
        with patch.object(sys, "argv", ["rewatch", "make"]):
            with pytest.raises(SystemExit) as exc_info:
                parse_args()

        assert exc_info.value.code == 2
        assert "paths" in capsys.readouterr().err

    def test_command_is_required(self):
        with patch.object(sys, "argv", ["rewatch"]):
            with pytest.raises(SystemExit) as exc_info:
                parse_args()
        assert exc_info.value.code == 2

    def test_version_flag(self, capsys):
        """--version prints the version and exits 0."""
        with patch.object(sys, "argv", ["rewatch", "--version"]):
            with pytest.raises(SystemExit) as exc_info:
                parse_args()

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_help_flag(self):
        with patch.object(sys, "argv", ["rewatch", "--help"]):
            with pytest.raises(SystemExit) as exc_info:
                parse_args()
        assert exc_info.value.code == 0


class TestMain:
    """Tests for main function exit codes."""

    def test_graceful_stop_exits_zero(self, tmp_path):
        (tmp_path / "app.py").write_text("")

        with (
            patch.object(sys, "argv", ["rewatch", "make", str(tmp_path)]),
            patch("rewatch.cli.RewatchController.run", new=AsyncMock(return_value=0)),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0

    def test_no_files_exits_one(self, tmp_path, capsys):
        """A scan that finds only ignored files is fatal."""
        (tmp_path / "logo.png").write_text("")

        with (
            patch.object(sys, "argv", ["rewatch", "make", str(tmp_path)]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        assert "No files to monitor" in capsys.readouterr().err

    def test_missing_paths_exit_one(self, tmp_path, capsys):
        with (
            patch.object(sys, "argv", ["rewatch", "make", str(tmp_path / "nope")]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1

    def test_watch_setup_failure_exits_one(self, tmp_path, capsys):
        (tmp_path / "app.py").write_text("")
        error = WatchSetupError(tmp_path, OSError("inotify watch limit reached"))

        with (
            patch.object(sys, "argv", ["rewatch", "make", str(tmp_path)]),
            patch("rewatch.cli.RewatchController.run", new=AsyncMock(side_effect=error)),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        assert "Failed to setup file watcher" in capsys.readouterr().err

    def test_scan_failure_exits_one(self, tmp_path, capsys):
        error = ScanError(tmp_path, PermissionError("denied"))

        with (
            patch.object(sys, "argv", ["rewatch", "make", str(tmp_path)]),
            patch("rewatch.cli.RewatchController.run", new=AsyncMock(side_effect=error)),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        assert "Failed to gather files to monitor" in capsys.readouterr().err

    def test_keyboard_interrupt_before_loop(self, tmp_path):
        with (
            patch.object(sys, "argv", ["rewatch", "make", str(tmp_path)]),
            patch("rewatch.cli.asyncio.run", side_effect=KeyboardInterrupt),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 130


def test_configure_logging_quiets_watchdog():
    configure_logging(verbose=True)
    assert logging.getLogger("watchdog").level == logging.WARNING
