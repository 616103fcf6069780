"""Initial watch-set enumeration from user-supplied files and directories."""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from rewatch_core.filter import DEFAULT_FILTER, IgnoreFilter

logger = logging.getLogger(__name__)


class ScanError(OSError):
    """An existing path could not be read during scanning."""

    def __init__(self, path: Path, reason: OSError):
        super().__init__(f"Failed to read directory {path}: {reason}")
        self.path = path
        self.reason = reason


def scan_directory(root: Path) -> list[Path]:
    """Collect every file below a directory.

    Uses an explicit worklist instead of recursion. Directory symlinks are
    followed, but each physical directory (by device and inode) is entered at
    most once, so symlink cycles terminate.

    Args:
        root: Directory to walk

    Returns:
        Files found under ``root`` (directories are never included)

    Raises:
        ScanError: If a directory in the tree cannot be read
    """
    files: list[Path] = []
    visited: set[tuple[int, int]] = set()
    pending: list[Path] = [root]

    while pending:
        directory = pending.pop()

        try:
            info = directory.stat()
        except OSError as e:
            raise ScanError(directory, e) from e

        key = (info.st_dev, info.st_ino)
        if key in visited:
            logger.debug(f"Skipping already visited directory: {directory}")
            continue
        visited.add(key)

        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    entry_path = directory / entry.name
                    try:
                        is_dir = entry.is_dir()
                    except OSError as e:
                        raise ScanError(entry_path, e) from e

                    if is_dir:
                        pending.append(entry_path)
                    else:
                        files.append(entry_path)
        except ScanError:
            raise
        except OSError as e:
            raise ScanError(directory, e) from e

    return files


def gather_files(
    paths: Iterable[str | Path],
    ignore_filter: IgnoreFilter | None = None,
) -> list[Path]:
    """Enumerate the files to watch from a list of files and directories.

    Missing paths are logged as warnings and skipped. Directories are walked
    recursively. Ignored files are dropped and duplicates are removed while
    keeping first-seen order.

    Args:
        paths: Files or directories supplied by the user
        ignore_filter: Filter to apply (defaults to the built-in list)

    Returns:
        Absolute paths of the files to watch, possibly empty

    Raises:
        ScanError: If an existing directory cannot be read
    """
    ignore_filter = ignore_filter or DEFAULT_FILTER
    seen: set[Path] = set()
    result: list[Path] = []

    for raw in paths:
        path = Path(raw).absolute()

        if not path.exists():
            logger.warning(f"Path does not exist: {raw}")
            continue

        candidates = scan_directory(path) if path.is_dir() else [path]

        for candidate in candidates:
            if ignore_filter.should_ignore(candidate) or candidate in seen:
                continue
            seen.add(candidate)
            result.append(candidate)

    logger.debug(f"Gathered {len(result)} file(s) to watch")
    return result
