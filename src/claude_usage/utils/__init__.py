"""Utilities package for Claude Usage."""

from typing import List

# Import what you need explicitly, e.g.
#   from claude_usage.utils.formatting import format_number
#   from claude_usage.utils.time_utils import TimezoneHandler

__all__: List[str] = []
