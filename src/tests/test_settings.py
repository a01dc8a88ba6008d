"""Tests for core/settings.py module."""

import json
import shutil
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from pydantic import ValidationError

from claude_usage.core.settings import LastUsedParams, Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove CLAUDE_USAGE_* variables so the host environment cannot leak in."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("CLAUDE_USAGE_"):
            monkeypatch.delenv(key, raising=False)


class TestLastUsedParams:
    """Test suite for LastUsedParams class."""

    def setup_method(self):
        """
        Set up a temporary directory and initialize a LastUsedParams instance for testing.
        """
        self.temp_dir = Path(tempfile.mkdtemp())
        self.last_used = LastUsedParams(self.temp_dir)

    def teardown_method(self):
        """
        Remove the temporary directory used for testing.
        """
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_init_default_config_dir(self):
        """
        Tests that LastUsedParams defaults to ~/.claude-usage/last_used.json.
        """
        last_used = LastUsedParams()
        expected_dir = Path.home() / ".claude-usage"
        assert last_used.config_dir == expected_dir
        assert last_used.params_file == expected_dir / "last_used.json"

    def test_init_custom_config_dir(self):
        """
        Test that LastUsedParams uses a custom configuration directory.
        """
        custom_dir = Path("/tmp/custom-config")
        last_used = LastUsedParams(custom_dir)
        assert last_used.config_dir == custom_dir
        assert last_used.params_file == custom_dir / "last_used.json"

    def test_save_success(self):
        """
        Verifies that the plan and a timestamp are written to the params file.
        """
        mock_settings = Mock()
        mock_settings.plan = "max5"

        self.last_used.save(mock_settings)

        assert self.last_used.params_file.exists()
        with open(self.last_used.params_file) as f:
            data = json.load(f)
        assert data["plan"] == "max5"
        assert "timestamp" in data
        assert not self.last_used.params_file.with_suffix(".tmp").exists()

    def test_save_creates_directory(self):
        """
        Test that save creates a missing config directory.
        """
        nested = LastUsedParams(self.temp_dir / "nested" / "config")
        mock_settings = Mock()
        mock_settings.plan = "pro"

        nested.save(mock_settings)

        assert nested.params_file.exists()

    @patch("claude_usage.core.settings.logger")
    def test_save_error_handling(self, mock_logger):
        """
        Test that save logs a warning instead of raising when writing fails.
        """
        mock_settings = Mock()
        mock_settings.plan = "pro"

        with patch("builtins.open", side_effect=PermissionError("Access denied")):
            self.last_used.save(mock_settings)

        mock_logger.warning.assert_called_once()
        assert "Failed to save" in mock_logger.warning.call_args[0][0]

    def test_load_success(self):
        """
        Test that load returns the saved parameters without the timestamp.
        """
        self.last_used.params_file.write_text(
            json.dumps({"plan": "max20", "timestamp": "2024-01-01T12:00:00"})
        )
        assert self.last_used.load() == {"plan": "max20"}

    def test_load_file_not_exists(self):
        """
        Test that load returns an empty dict when nothing was saved.
        """
        assert self.last_used.load() == {}

    @patch("claude_usage.core.settings.logger")
    def test_load_error_handling(self, mock_logger):
        """
        Test that invalid JSON is logged and ignored.
        """
        self.last_used.params_file.write_text("invalid json")

        assert self.last_used.load() == {}
        mock_logger.warning.assert_called_once()

    @patch("claude_usage.core.settings.logger")
    def test_load_non_object(self, mock_logger):
        """
        Test that a JSON value other than an object is ignored.
        """
        self.last_used.params_file.write_text("[1, 2]")

        assert self.last_used.load() == {}
        mock_logger.warning.assert_called_once()

    def test_clear_and_exists(self):
        """
        Test that clear removes the file and exists reports it.
        """
        assert not self.last_used.exists()
        self.last_used.params_file.write_text("{}")
        assert self.last_used.exists()

        self.last_used.clear()

        assert not self.last_used.exists()

    def test_clear_file_not_exists(self):
        """
        Test that clearing without a file does nothing.
        """
        self.last_used.clear()
        assert not self.last_used.exists()


class TestSettings:
    """Test suite for Settings class."""

    def test_default_values(self):
        """
        Test that Settings has the documented defaults.
        """
        settings = Settings(_cli_parse_args=[])

        assert settings.plan == "pro"
        assert settings.data_dir is None
        assert settings.verbose is False
        assert settings.report is False
        assert settings.timezone == "UTC"
        assert settings.refresh_rate == 5
        assert settings.refresh_per_second == 10.0
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert settings.debug is False
        assert settings.clear is False

    def test_cli_arguments(self):
        """
        Test that kebab-case options and implicit flags are parsed.
        """
        settings = Settings(
            _cli_parse_args=[
                "--plan",
                "max20",
                "--data-dir",
                "/tmp/claude-data",
                "--refresh-rate",
                "10",
                "--report",
                "--verbose",
            ]
        )

        assert settings.plan == "max20"
        assert settings.data_dir == Path("/tmp/claude-data")
        assert settings.refresh_rate == 10
        assert settings.report is True
        assert settings.verbose is True

    def test_short_cli_arguments(self):
        """
        Test that -p, -d and -v are accepted as short forms.
        """
        settings = Settings(_cli_parse_args=["-p", "max20", "-d", "/tmp/claude-data", "-v"])

        assert settings.plan == "max20"
        assert settings.data_dir == Path("/tmp/claude-data")
        assert settings.verbose is True

    def test_environment_variables(self, monkeypatch):
        """
        Test that CLAUDE_USAGE_* environment variables are read.
        """
        monkeypatch.setenv("CLAUDE_USAGE_PLAN", "max5")
        monkeypatch.setenv("CLAUDE_USAGE_TIMEZONE", "Europe/Warsaw")

        settings = Settings(_cli_parse_args=[])

        assert settings.plan == "max5"
        assert settings.timezone == "Europe/Warsaw"

    def test_cli_overrides_environment(self, monkeypatch):
        """
        Test that the command line wins over the environment.
        """
        monkeypatch.setenv("CLAUDE_USAGE_PLAN", "max5")
        settings = Settings(_cli_parse_args=["--plan", "max20"])
        assert settings.plan == "max20"

    @pytest.mark.parametrize("value,expected", [("PRO", "pro"), ("Max5", "max5"), ("max20", "max20")])
    def test_plan_validator_case_insensitive(self, value, expected):
        """
        Test that plan names are normalized to lower case.
        """
        assert Settings(_cli_parse_args=[], plan=value).plan == expected

    def test_plan_validator_invalid_value(self):
        """
        Test that unknown plans are rejected.
        """
        with pytest.raises(ValidationError, match="Invalid plan: enterprise"):
            Settings(_cli_parse_args=[], plan="enterprise")

    def test_timezone_validator(self):
        """
        Test that timezones are validated with pytz.
        """
        assert Settings(_cli_parse_args=[], timezone="Asia/Tokyo").timezone == "Asia/Tokyo"
        with pytest.raises(ValidationError, match="Invalid timezone"):
            Settings(_cli_parse_args=[], timezone="Invalid/Zone")

    def test_log_level_validator(self):
        """
        Test that log levels are upper-cased and validated.
        """
        assert Settings(_cli_parse_args=[], log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_cli_parse_args=[], log_level="verbose")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("refresh_rate", 0),
            ("refresh_rate", 61),
            ("refresh_per_second", 0.05),
            ("refresh_per_second", 21.0),
        ],
    )
    def test_field_constraints(self, field, value):
        """
        Test that numeric settings outside their range are rejected.
        """
        with pytest.raises(ValidationError):
            Settings(_cli_parse_args=[], **{field: value})


class TestLoadWithLastUsed:
    """Test suite for Settings.load_with_last_used."""

    @pytest.mark.parametrize("argv", [["-p", "max5"], ["-pmax5"]])
    def test_short_plan_flag_saved(self, argv):
        """
        Test that -p counts as an explicit plan and is saved.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            mock_instance = Mock()
            mock_instance.load.return_value = {"plan": "max20"}
            MockLastUsed.return_value = mock_instance

            settings = Settings.load_with_last_used(argv)

        assert settings.plan == "max5"
        mock_instance.save.assert_called_once_with(settings)
        mock_instance.load.assert_not_called()

    def test_short_flags(self):
        """
        Test that -d and -v set the data directory and verbose output.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            MockLastUsed.return_value.load.return_value = {}
            settings = Settings.load_with_last_used(["-d", "/tmp/claude-data", "-v"])

        assert settings.data_dir == Path("/tmp/claude-data")
        assert settings.verbose is True
        assert settings.plan == "pro"

    def test_version_flag_parsed_only(self):
        """
        Test that --version is left to the entry point and just sets the field.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            MockLastUsed.return_value.load.return_value = {}
            with patch("builtins.print") as mock_print:
                settings = Settings.load_with_last_used(["--version"])

        assert settings.version is True
        mock_print.assert_not_called()

    def test_clear_flag(self):
        """
        Test that --clear forgets the saved plan before loading.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            mock_instance = Mock()
            mock_instance.load.return_value = {}
            MockLastUsed.return_value = mock_instance

            settings = Settings.load_with_last_used(["--clear"])

        mock_instance.clear.assert_called_once()
        assert settings.clear is True
        assert settings.plan == "pro"

    def test_saved_plan_used(self):
        """
        Test that the saved plan applies when none is given.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            mock_instance = Mock()
            mock_instance.load.return_value = {"plan": "max20"}
            MockLastUsed.return_value = mock_instance

            settings = Settings.load_with_last_used([])

        assert settings.plan == "max20"
        mock_instance.save.assert_not_called()

    def test_explicit_plan_saved(self):
        """
        Test that an explicit plan wins over the saved one and is saved.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            mock_instance = Mock()
            mock_instance.load.return_value = {"plan": "max20"}
            MockLastUsed.return_value = mock_instance

            settings = Settings.load_with_last_used(["--plan=max5"])

        assert settings.plan == "max5"
        mock_instance.save.assert_called_once_with(settings)
        mock_instance.load.assert_not_called()

    def test_environment_plan_counts_as_explicit(self, monkeypatch):
        """
        Test that CLAUDE_USAGE_PLAN is treated like --plan.
        """
        monkeypatch.setenv("CLAUDE_USAGE_PLAN", "max5")
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            mock_instance = Mock()
            MockLastUsed.return_value = mock_instance

            settings = Settings.load_with_last_used([])

        assert settings.plan == "max5"
        mock_instance.save.assert_called_once()

    @patch("claude_usage.core.settings.logger")
    def test_invalid_saved_plan_ignored(self, mock_logger):
        """
        Test that a corrupt saved plan falls back to the default with a warning.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            mock_instance = Mock()
            mock_instance.load.return_value = {"plan": "platinum"}
            MockLastUsed.return_value = mock_instance

            settings = Settings.load_with_last_used([])

        assert settings.plan == "pro"
        mock_logger.warning.assert_called_once()

    def test_debug_flag(self):
        """
        Test that --debug forces DEBUG logging.
        """
        with patch("claude_usage.core.settings.LastUsedParams") as MockLastUsed:
            MockLastUsed.return_value.load.return_value = {}
            settings = Settings.load_with_last_used(["--debug", "--log-level", "ERROR"])

        assert settings.debug is True
        assert settings.log_level == "DEBUG"

    def test_settings_customise_sources(self):
        """
        Test that only init kwargs and the environment are configured as sources.
        """
        init, env, dotenv, secrets = Mock(), Mock(), Mock(), Mock()
        sources = Settings.settings_customise_sources(Settings, init, env, dotenv, secrets)
        assert sources == (init, env)
