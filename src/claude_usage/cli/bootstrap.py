"""Bootstrap utilities for CLI initialization."""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from claude_usage.utils.time_utils import TimezoneHandler

APP_DIR = Path.home() / ".claude-usage"


def setup_logging(
    level: str = "INFO", log_file: Optional[Path] = None, disable_console: bool = False
) -> None:
    """
    Configure the root logger.

    Parameters:
        level (str): Logging level name (e.g., "DEBUG", "INFO").
        log_file (Optional[Path]): File that also receives log records, if given.
        disable_console (bool): If True, nothing is logged to the console.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: List[logging.Handler] = []
    if not disable_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def setup_environment() -> None:
    """
    Make stdout UTF-8; bars and the spinner use block and braille characters.
    """
    encoding = getattr(sys.stdout, "encoding", None)
    if encoding and encoding.lower() != "utf-8" and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")


def init_timezone(timezone: str = "UTC") -> TimezoneHandler:
    """Create a TimezoneHandler for the display timezone."""
    return TimezoneHandler(default_tz=timezone)


def ensure_directories() -> None:
    """Create ``~/.claude-usage`` and its ``logs`` subdirectory."""
    for directory in (APP_DIR, APP_DIR / "logs"):
        directory.mkdir(parents=True, exist_ok=True)
