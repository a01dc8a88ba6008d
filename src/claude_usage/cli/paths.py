"""Discovery of Claude Code data directories."""

import logging
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

STANDARD_CLAUDE_PATHS = ("~/.claude/projects", "~/.config/claude/projects")


def get_standard_claude_paths() -> List[str]:
    """Return the standard Claude data locations, unexpanded."""
    return list(STANDARD_CLAUDE_PATHS)


def discover_claude_data_paths(
    custom_paths: Optional[List[Union[str, Path]]] = None,
) -> List[Path]:
    """
    Return the existing directories among the candidate data locations.

    Parameters:
        custom_paths: Locations to check instead of the standard ones.

    Returns:
        Expanded, resolved directories in the order they were given.
    """
    candidates = custom_paths if custom_paths is not None else get_standard_claude_paths()

    discovered: List[Path] = []
    for candidate in candidates:
        path = Path(candidate).expanduser().resolve()
        if path.is_dir():
            discovered.append(path)
        else:
            logger.debug(f"Claude data path not found: {path}")

    return discovered
