"""Tests for terminal management."""

from unittest.mock import Mock, patch

from claude_usage.terminal import manager
from claude_usage.terminal.manager import (
    KEY_ESCAPE,
    read_key,
    restore_terminal,
    setup_terminal,
)


def _tty_stdin() -> Mock:
    stdin = Mock()
    stdin.isatty.return_value = True
    stdin.fileno.return_value = 0
    return stdin


class TestSetupAndRestore:
    """Test cases for terminal setup and restore."""

    @patch("claude_usage.terminal.manager.sys.stdin")
    def test_setup_without_tty(self, mock_stdin) -> None:
        mock_stdin.isatty.return_value = False
        assert setup_terminal() is None

    @patch("claude_usage.terminal.manager.HAS_TERMIOS", False)
    def test_setup_without_termios(self) -> None:
        assert setup_terminal() is None

    @patch("claude_usage.terminal.manager._restore_terminal_display")
    @patch("claude_usage.terminal.manager.sys.stdin")
    def test_restore_without_settings(self, mock_stdin, mock_display) -> None:
        """Without saved settings only the display is restored."""
        restore_terminal(None)
        mock_display.assert_called_once()


class TestReadKey:
    """Test cases for read_key."""

    @patch("claude_usage.terminal.manager.HAS_MSVCRT", False)
    @patch("claude_usage.terminal.manager.time.sleep")
    @patch("claude_usage.terminal.manager.sys.stdin")
    def test_no_tty_waits_and_returns_none(self, mock_stdin, mock_sleep) -> None:
        mock_stdin.isatty.return_value = False
        assert read_key(timeout=0.1) is None
        mock_sleep.assert_called_once_with(0.1)

    @patch("claude_usage.terminal.manager.HAS_TERMIOS", True)
    @patch("claude_usage.terminal.manager._stdin_ready", return_value=False)
    def test_timeout(self, mock_ready) -> None:
        with patch.object(manager.sys, "stdin", _tty_stdin()):
            assert read_key(timeout=0.1) is None
        mock_ready.assert_called_once_with(0.1)

    @patch("claude_usage.terminal.manager.HAS_TERMIOS", True)
    @patch("claude_usage.terminal.manager.os.read", return_value=b"q")
    @patch("claude_usage.terminal.manager._stdin_ready", return_value=True)
    def test_plain_key(self, mock_ready, mock_read) -> None:
        with patch.object(manager.sys, "stdin", _tty_stdin()):
            assert read_key(timeout=0.1) == "q"

    @patch("claude_usage.terminal.manager.HAS_TERMIOS", True)
    @patch("claude_usage.terminal.manager.os.read", return_value=b"\x1b")
    @patch("claude_usage.terminal.manager._stdin_ready", side_effect=[True, False])
    def test_lone_escape(self, mock_ready, mock_read) -> None:
        with patch.object(manager.sys, "stdin", _tty_stdin()):
            assert read_key(timeout=0.1) == KEY_ESCAPE

    @patch("claude_usage.terminal.manager.HAS_TERMIOS", True)
    @patch("claude_usage.terminal.manager.os.read", side_effect=[b"\x1b", b"[A"])
    @patch("claude_usage.terminal.manager._stdin_ready", side_effect=[True, True, True, False])
    def test_escape_sequence_ignored(self, mock_ready, mock_read) -> None:
        """Arrow keys and similar sequences are drained and ignored."""
        with patch.object(manager.sys, "stdin", _tty_stdin()):
            assert read_key(timeout=0.1) is None
        assert mock_read.call_count == 2
