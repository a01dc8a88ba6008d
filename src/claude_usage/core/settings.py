"""Settings management for Claude Usage.

Command-line arguments and ``CLAUDE_USAGE_*`` environment variables are
parsed with pydantic-settings. The last explicitly chosen plan is remembered
between runs.
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLAUDE_USAGE_"
DEFAULT_CONFIG_DIR = Path.home() / ".claude-usage"
VALID_PLANS = ("pro", "max5", "max20")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LastUsedParams:
    """Persists the last explicitly selected plan."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """Initialize with the config directory (default ``~/.claude-usage``)."""
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.params_file = self.config_dir / "last_used.json"

    def save(self, settings: "Settings") -> None:
        """Save the plan of ``settings``; failures are logged, never raised."""
        try:
            params = {
                "plan": settings.plan,
                "timestamp": datetime.now().isoformat(),
            }

            self.config_dir.mkdir(parents=True, exist_ok=True)

            temp_file = self.params_file.with_suffix(".tmp")
            with open(temp_file, "w") as f:
                json.dump(params, f, indent=2)
            temp_file.replace(self.params_file)

            logger.debug(f"Saved last used params to {self.params_file}")

        except Exception as e:
            logger.warning(f"Failed to save last used params: {e}")

    def load(self) -> Dict[str, Any]:
        """Load saved parameters without the timestamp; {} if missing or broken."""
        if not self.params_file.exists():
            return {}

        try:
            with open(self.params_file) as f:
                params = json.load(f)

            if not isinstance(params, dict):
                raise ValueError("saved parameters are not a JSON object")

            params.pop("timestamp", None)
            logger.debug(f"Loaded last used params from {self.params_file}")
            return params

        except Exception as e:
            logger.warning(f"Failed to load last used params: {e}")
            return {}

    def clear(self) -> None:
        """Delete the saved parameters file."""
        try:
            if self.params_file.exists():
                self.params_file.unlink()
                logger.debug("Cleared last used params")
        except Exception as e:
            logger.warning(f"Failed to clear last used params: {e}")

    def exists(self) -> bool:
        return self.params_file.exists()


class Settings(BaseSettings):
    """Command-line and environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
        cli_parse_args=True,
        cli_prog_name="claude-usage",
        cli_kebab_case=True,
        cli_implicit_flags=True,
        cli_shortcuts={"plan": "p", "data-dir": "d", "verbose": "v"},
    )

    plan: Literal["pro", "max5", "max20"] = Field(
        default="pro",
        description="Claude plan whose allowance is tracked (pro, max5, max20)",
    )

    data_dir: Optional[Path] = Field(
        default=None,
        description="JSONL file or directory to read instead of the standard Claude paths",
    )

    verbose: bool = Field(default=False, description="Print per-block details in the report")

    report: bool = Field(
        default=False,
        description="Print a one-off usage report instead of the live dashboard",
    )

    timezone: str = Field(
        default="UTC",
        description="Timezone for displayed times (e.g. UTC, Europe/Warsaw)",
    )

    refresh_rate: int = Field(
        default=5, ge=1, le=60, description="Seconds between data reloads (1-60)"
    )

    refresh_per_second: float = Field(
        default=10.0,
        ge=0.1,
        le=20.0,
        description="Dashboard redraws per second (0.1-20.0)",
    )

    log_level: str = Field(default="INFO", description="Logging level")

    log_file: Optional[Path] = Field(default=None, description="Log file path")

    debug: bool = Field(default=False, description="Enable debug logging")

    version: bool = Field(default=False, description="Show version information")

    clear: bool = Field(default=False, description="Forget the saved plan")

    @field_validator("plan", mode="before")
    @classmethod
    def validate_plan(cls, v: Any) -> str:
        if isinstance(v, str):
            value = v.strip().lower()
            if value in VALID_PLANS:
                return value
        raise ValueError(f"Invalid plan: {v}. Must be one of: {', '.join(VALID_PLANS)}")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Invalid timezone: {v}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        value = str(v).upper()
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Any,
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Command line first (added by pydantic-settings), then init kwargs, then env."""
        return init_settings, env_settings

    @classmethod
    def load_with_last_used(cls, argv: Optional[List[str]] = None) -> "Settings":
        """
        Parse settings and resolve the plan against the saved one.

        An explicitly given plan (``--plan``, ``-p`` or ``CLAUDE_USAGE_PLAN``)
        wins and is saved; otherwise the saved plan is used, falling back to
        the default.
        ``--clear`` forgets the saved plan first.
        """
        argv = list(sys.argv[1:] if argv is None else argv)

        last_used = LastUsedParams()
        if "--clear" in argv:
            last_used.clear()

        settings = cls(_cli_parse_args=argv)

        if cls._plan_given_explicitly(argv):
            last_used.save(settings)
        else:
            saved_plan = last_used.load().get("plan")
            if saved_plan is not None:
                try:
                    settings.plan = cls.validate_plan(saved_plan)
                except ValueError as e:
                    logger.warning(f"Ignoring saved plan: {e}")

        if settings.debug:
            settings.log_level = "DEBUG"

        return settings

    @staticmethod
    def _plan_given_explicitly(argv: List[str]) -> bool:
        if any(arg == "--plan" or arg.startswith(("--plan=", "-p")) for arg in argv):
            return True
        return any(key.upper() == f"{ENV_PREFIX}PLAN" for key in os.environ)
