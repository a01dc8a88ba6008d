"""Terminal management for Claude Usage.
Raw mode setup, non-blocking key input, and terminal control.
"""

import logging
import os
import sys
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Platform-specific imports
try:
    import select
    import termios

    HAS_TERMIOS = True
except ImportError:
    HAS_TERMIOS = False

try:
    import msvcrt

    HAS_MSVCRT = True
except ImportError:
    HAS_MSVCRT = False

# termios attribute lists are opaque outside POSIX
TerminalAttributesType = Any

ESCAPE = "\x1b"
KEY_ESCAPE = "escape"


def setup_terminal() -> Optional[TerminalAttributesType]:
    """Switch stdin to unbuffered, non-echoing input so keys reach us directly.

    Returns:
        Terminal settings for restoration, or None if setup failed.
    """
    if not HAS_TERMIOS or not sys.stdin.isatty():
        return None

    try:
        old_settings = termios.tcgetattr(sys.stdin)
        new_settings = termios.tcgetattr(sys.stdin)

        # Index 3 holds the local modes
        new_settings[3] = new_settings[3] & ~(termios.ECHO | termios.ICANON)
        new_settings[6][termios.VMIN] = 1
        new_settings[6][termios.VTIME] = 0

        termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
        return old_settings
    except (OSError, termios.error, AttributeError) as e:
        logger.debug(f"Failed to setup terminal raw mode: {e}")
        return None


def restore_terminal(old_settings: Optional[TerminalAttributesType]) -> None:
    """Restore terminal to original settings.

    Args:
        old_settings: Previously saved terminal attributes to restore.
    """
    _restore_terminal_display()

    if old_settings and HAS_TERMIOS and sys.stdin.isatty():
        try:
            termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
            logger.debug("Terminal settings restored successfully")
        except (OSError, termios.error, AttributeError) as e:
            logger.warning(f"Failed to restore terminal settings: {e}")


def _restore_terminal_display() -> None:
    try:
        # Show cursor and leave the alternate screen
        sys.stdout.write("\033[?25h\033[?1049l")
        sys.stdout.flush()
    except (OSError, AttributeError) as e:
        logger.debug(f"Failed to restore terminal display: {e}")


def read_key(timeout: float = 0.0) -> Optional[str]:
    """Read one key press without blocking longer than ``timeout`` seconds.

    Printable keys are returned as the character itself and a lone Esc as
    ``KEY_ESCAPE``. Escape sequences (arrow keys and the like) are consumed
    and ignored.

    Returns:
        The key, or None if nothing usable was pressed.
    """
    if HAS_TERMIOS and sys.stdin.isatty():
        return _read_key_posix(timeout)
    if HAS_MSVCRT:
        return _read_key_windows(timeout)
    time.sleep(timeout)
    return None


def _stdin_ready(timeout: float) -> bool:
    ready, _, _ = select.select([sys.stdin], [], [], timeout)
    return bool(ready)


def _read_key_posix(timeout: float) -> Optional[str]:
    try:
        if not _stdin_ready(timeout):
            return None

        fd = sys.stdin.fileno()
        char = os.read(fd, 1).decode("utf-8", errors="ignore")
        if char != ESCAPE:
            return char or None

        if not _stdin_ready(0.01):
            return KEY_ESCAPE

        # Drain the rest of the escape sequence
        while _stdin_ready(0.0):
            os.read(fd, 32)
        return None
    except (OSError, ValueError) as e:
        logger.debug(f"Failed to read key: {e}")
        return None


def _read_key_windows(timeout: float) -> Optional[str]:
    if not msvcrt.kbhit():
        time.sleep(timeout)
        return None

    char = msvcrt.getwch()
    if char in ("\x00", "\xe0"):
        # Special key prefix, the next call returns its scan code
        msvcrt.getwch()
        return None
    if char == ESCAPE:
        return KEY_ESCAPE
    return char
