"""rewatch: Rerun a command whenever watched files change."""

__version__ = "0.1.0"

# Public API
from rewatch.console import ConsoleNotifier
from rewatch.controller import NothingToWatchError, RewatchController

__all__ = [
    "__version__",
    # Primary components
    "RewatchController",
    "ConsoleNotifier",
    "NothingToWatchError",
]
