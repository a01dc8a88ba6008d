"""Version lookup from the installed package metadata."""

import importlib.metadata


def get_version() -> str:
    """
    Return the installed version of the claude-usage distribution.

    Returns "unknown" when the package is imported from a source tree that
    was never installed.
    """
    try:
        return importlib.metadata.version("claude-usage")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


__version__: str = get_version()
