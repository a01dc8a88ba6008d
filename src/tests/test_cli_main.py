"""Tests for CLI main module."""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch

from claude_usage.cli.main import main


def _settings(**overrides) -> Mock:
    settings = Mock()
    settings.plan = "pro"
    settings.data_dir = None
    settings.report = False
    settings.verbose = False
    settings.timezone = "UTC"
    settings.refresh_rate = 5
    settings.refresh_per_second = 10.0
    settings.log_level = "INFO"
    settings.log_file = None
    settings.debug = False
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


class TestMain:
    """Test cases for main function."""

    def test_version_flag(self) -> None:
        """Test --version flag returns 0 and prints version."""
        with patch("builtins.print") as mock_print:
            result = main(["--version"])
            assert result == 0
            mock_print.assert_called_once()
            assert "claude-usage" in mock_print.call_args[0][0]

    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_keyboard_interrupt_handling(self, mock_load: Mock) -> None:
        """Test keyboard interrupt returns 0."""
        mock_load.side_effect = KeyboardInterrupt()
        with patch("builtins.print") as mock_print:
            result = main(["--plan", "pro"])
            assert result == 0
            mock_print.assert_called_once_with("\n\nMonitoring stopped by user.")

    @patch("claude_usage.cli.main.report_error")
    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_exception_handling(self, mock_load: Mock, mock_report: Mock) -> None:
        """Test unexpected exceptions are reported and return 1."""
        mock_load.side_effect = Exception("Test error")

        with patch("builtins.print"):
            result = main(["--plan", "pro"])

        assert result == 1
        mock_report.assert_called_once()
        assert mock_report.call_args[1]["component"] == "cli_main"

    @patch("claude_usage.cli.main.DisplayController")
    @patch("claude_usage.cli.main.MonitoringOrchestrator")
    @patch("claude_usage.cli.main.setup_logging")
    @patch("claude_usage.cli.main.ensure_directories")
    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_monitoring_mode(
        self,
        mock_load: Mock,
        mock_dirs: Mock,
        mock_logging: Mock,
        mock_orchestrator: Mock,
        mock_controller: Mock,
    ) -> None:
        """Without --report the live dashboard runs."""
        mock_load.return_value = _settings(plan="max5", refresh_rate=7, data_dir=Path("/d"))

        assert main([]) == 0

        mock_logging.assert_called_once_with("INFO", None, disable_console=True)
        orchestrator_kwargs = mock_orchestrator.call_args[1]
        assert orchestrator_kwargs["update_interval"] == 7
        assert orchestrator_kwargs["data_path"] == Path("/d")
        state = mock_orchestrator.call_args[0][0]
        assert state.plan.value == "max5"
        mock_controller.return_value.run.assert_called_once()

    @patch("claude_usage.cli.main.setup_logging")
    @patch("claude_usage.cli.main.ensure_directories")
    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_debug_keeps_console_logging(
        self, mock_load: Mock, mock_dirs: Mock, mock_logging: Mock
    ) -> None:
        """--debug logs to the console as well."""
        mock_load.return_value = _settings(
            debug=True, log_level="DEBUG", report=True, data_dir=Path("/nonexistent-x")
        )

        with patch("claude_usage.cli.main.Console"):
            main(["--debug", "--report"])

        mock_logging.assert_called_once_with("DEBUG", None, disable_console=False)

    @patch("claude_usage.cli.main.setup_logging")
    @patch("claude_usage.cli.main.ensure_directories")
    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_report_keeps_console_logging(
        self, mock_load: Mock, mock_dirs: Mock, mock_logging: Mock
    ) -> None:
        """--report logs warnings to stderr even without --debug."""
        mock_load.return_value = _settings(report=True, data_dir=Path("/nonexistent-x"))

        with patch("claude_usage.cli.main.Console"):
            main(["--report"])

        mock_logging.assert_called_once_with("INFO", None, disable_console=False)


class TestReportMode:
    """Test cases for --report."""

    def setup_method(self) -> None:
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    @patch("claude_usage.cli.main.print_report")
    @patch("claude_usage.cli.main.setup_logging")
    @patch("claude_usage.cli.main.ensure_directories")
    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_report_printed(
        self,
        mock_load: Mock,
        mock_dirs: Mock,
        mock_logging: Mock,
        mock_print_report: Mock,
        write_jsonl,
        sample_entries,
    ) -> None:
        """--report loads the data once and prints the report."""
        write_jsonl(self.temp_dir / "usage.jsonl", [e.to_dict() for e in sample_entries])
        mock_load.return_value = _settings(report=True, data_dir=self.temp_dir)

        assert main(["--report"]) == 0

        lines = mock_print_report.call_args[0][0]
        assert lines[0] == "Loaded 4 entries across 2 sessions"

    @patch("claude_usage.cli.main.setup_logging")
    @patch("claude_usage.cli.main.ensure_directories")
    @patch("claude_usage.cli.main.Settings.load_with_last_used")
    def test_report_without_data(
        self, mock_load: Mock, mock_dirs: Mock, mock_logging: Mock
    ) -> None:
        """A missing data path prints the error and returns 1."""
        mock_load.return_value = _settings(report=True, data_dir=self.temp_dir / "missing")

        with patch("claude_usage.cli.main.Console") as mock_console:
            assert main(["--report"]) == 1

        printed = mock_console.return_value.print.call_args[0][0]
        assert "Path does not exist" in printed
