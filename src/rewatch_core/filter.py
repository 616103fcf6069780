"""Extension-based ignore filter shared by the scanner and the change watcher."""

from dataclasses import dataclass, field
from pathlib import PurePath

DEFAULT_IGNORED_EXTENSIONS: frozenset[str] = frozenset(
    {
        # Compiled bytecode
        "pyc",
        # Editor swap files
        "swp",
        "swo",
        # Images and design assets
        "bmp",
        "jpg",
        "jpeg",
        "png",
        "gif",
        "svg",
        "psd",
        "xcf",
        "pxm",
    }
)


@dataclass(frozen=True)
class IgnoreFilter:
    """Immutable predicate excluding generated or binary artifacts by extension."""

    extensions: frozenset[str] = field(default=DEFAULT_IGNORED_EXTENSIONS)
    """Lowercase extensions (without the leading dot) to ignore."""

    def should_ignore(self, path: str | PurePath) -> bool:
        """Check whether a path should be excluded.

        Only the text after the final ``.`` of the last path component is
        considered, compared case-insensitively. No filesystem access.

        Args:
            path: Path to check

        Returns:
            True if the path's extension is in the ignore list
        """
        name = PurePath(path).name
        if "." not in name:
            return False

        extension = name.rsplit(".", 1)[1]
        return extension.lower() in self.extensions


DEFAULT_FILTER = IgnoreFilter()


def should_ignore(path: str | PurePath) -> bool:
    """Check a path against the built-in ignore list."""
    return DEFAULT_FILTER.should_ignore(path)
