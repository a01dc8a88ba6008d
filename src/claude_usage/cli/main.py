"""Command-line entry point for Claude Usage."""

import logging
import sys
from typing import List, Optional

from rich.console import Console

from claude_usage import __version__
from claude_usage.cli.bootstrap import (
    ensure_directories,
    init_timezone,
    setup_environment,
    setup_logging,
)
from claude_usage.core.models import ClaudePlan
from claude_usage.core.settings import Settings
from claude_usage.data.loader import DataLoadError
from claude_usage.error_handling import report_error
from claude_usage.monitoring.orchestrator import MonitoringOrchestrator
from claude_usage.ui.display_controller import DisplayController
from claude_usage.ui.report import build_report, print_report
from claude_usage.ui.state import AppState, NoUsageDataError

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the report or the live dashboard. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]

    if "--version" in argv:
        print(f"claude-usage {__version__}")
        return 0

    try:
        settings = Settings.load_with_last_used(argv)

        setup_environment()
        ensure_directories()
        # console output would corrupt the live dashboard
        setup_logging(
            settings.log_level,
            settings.log_file,
            disable_console=not (settings.debug or settings.report),
        )

        plan = ClaudePlan.from_string(settings.plan)
        logger.debug(f"Using plan {plan.display_name}")

        if settings.report:
            return _run_report(settings, plan)

        _run_monitoring(settings, plan)
        return 0

    except KeyboardInterrupt:
        print("\n\nMonitoring stopped by user.")
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        report_error(
            exception=e,
            component="cli_main",
            context_name="main_error",
            context_data={"argv": argv},
        )
        print(f"\n\nError: {e}", file=sys.stderr)
        return 1


def _run_report(settings: Settings, plan: ClaudePlan) -> int:
    """Load the data once and print the text report."""
    console = Console()
    state = AppState(plan)
    try:
        state.load_data(settings.data_dir)
    except (NoUsageDataError, DataLoadError) as e:
        console.print(f"[red]{e}[/]", highlight=False)
        return 1

    lines = build_report(
        state.monitor,
        timezone_handler=init_timezone(settings.timezone),
        verbose=settings.verbose,
    )
    print_report(lines, console)
    return 0


def _run_monitoring(settings: Settings, plan: ClaudePlan) -> None:
    """Run the live dashboard until the user quits."""
    state = AppState(plan)
    orchestrator = MonitoringOrchestrator(
        state, update_interval=settings.refresh_rate, data_path=settings.data_dir
    )
    controller = DisplayController(
        state,
        orchestrator,
        timezone_handler=init_timezone(settings.timezone),
        refresh_per_second=settings.refresh_per_second,
    )
    controller.run()


if __name__ == "__main__":
    sys.exit(main())
