"""CLI entry point for rewatch: rerun a command whenever watched files change."""

import argparse
import asyncio
import logging
import sys

from rewatch import __version__
from rewatch.console import ConsoleNotifier
from rewatch.controller import NothingToWatchError, RewatchController
from rewatch_core.file_watcher import WatchSetupError
from rewatch_core.scanner import ScanError


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
    )

    # Suppress noisy loggers
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Arguments to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="rewatch",
        description="Rerun a command when files change.",
        epilog="Examples:\n"
        "  rewatch make src/                 # Rebuild when anything under src/ changes\n"
        "  rewatch 'pytest -x' src tests     # Rerun tests, quoting the command\n"
        "  rewatch './deploy.sh' config.yml  # Watch a single file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "command",
        help="Shell command to execute (e.g. 'make', 'pytest -x')",
    )

    parser.add_argument(
        "paths",
        nargs="+",
        help="Files or directories to watch for changes",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log watcher activity to stderr",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def main() -> None:
    """
    Main entry point for the rewatch CLI.

    Handles:
    - Argument parsing and logging setup
    - Running the watch loop until interrupted
    - Error reporting and exit codes
    """
    args = parse_args()
    configure_logging(args.verbose)

    controller = RewatchController(args.command, args.paths, notifier=ConsoleNotifier())

    try:
        exit_code = asyncio.run(controller.run())
    except KeyboardInterrupt:
        # Interrupted before the watch loop took over signal handling
        sys.exit(130)
    except NothingToWatchError:
        print("Error: No files to monitor", file=sys.stderr)
        sys.exit(1)
    except ScanError as e:
        print(f"Error: Failed to gather files to monitor: {e}", file=sys.stderr)
        sys.exit(1)
    except WatchSetupError as e:
        print(f"Error: Failed to setup file watcher: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
