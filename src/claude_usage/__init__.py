"""Claude Usage: token usage analytics and a live terminal monitor for Claude plans."""

from claude_usage._version import __version__

__all__ = ["__version__"]
