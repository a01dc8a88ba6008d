"""Shared dashboard state for Claude Usage.

``AppState`` is written by the refresh thread and read by the render loop;
both sides hold ``AppState.lock`` while touching it.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from claude_usage.cli.paths import discover_claude_data_paths, get_standard_claude_paths
from claude_usage.core.models import BurnRate, ClaudePlan
from claude_usage.data.loader import DataLoadError
from claude_usage.monitoring.monitor import UsageMonitor
from claude_usage.utils.time_utils import floor_to_hour, format_clock

logger = logging.getLogger(__name__)

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
SESSION_WINDOW = timedelta(hours=5)


class NoUsageDataError(Exception):
    """No usage data could be found at the configured or standard locations."""


class PopupType(Enum):
    CURRENT_BLOCK = "current_block"
    LIFETIME_STATS = "lifetime_stats"


class AppState:
    """Usage data plus the view state of the live dashboard."""

    def __init__(self, plan: ClaudePlan, monitor: Optional[UsageMonitor] = None):
        self.lock = threading.RLock()
        self.monitor = monitor or UsageMonitor()
        self.plan = plan
        self.last_update = datetime.now(timezone.utc)
        self.is_loading = False
        self.spinner_state = 0
        self.data_loaded = False
        self.error_message: Optional[str] = None
        self.active_popup: Optional[PopupType] = None

    def load_data(self, data_dir: Optional[Union[str, Path]] = None) -> None:
        """
        Reload usage data and record the outcome.

        With ``data_dir`` a file is loaded as JSONL and a directory is scanned
        recursively. Without it, the standard Claude locations are tried in
        order until one yields entries.

        The new data is read into a fresh monitor and swapped in under the
        lock, so readers never see a half-loaded state.

        Raises:
            NoUsageDataError: If the path does not exist or nothing was found.
            DataLoadError: If the data could not be read.
        """
        with self.lock:
            self.is_loading = True
            self.error_message = None

        monitor = UsageMonitor(pricing_provider=self.monitor.pricing_provider)
        error: Optional[Exception] = None
        try:
            if data_dir is not None:
                self._load_path(monitor, Path(data_dir).expanduser())
            else:
                self._load_discovered(monitor)
        except (NoUsageDataError, DataLoadError) as e:
            error = e

        with self.lock:
            if error is None:
                self.monitor = monitor
                self.data_loaded = True
                self.error_message = None
            else:
                self.data_loaded = False
                self.error_message = str(error)
            self.is_loading = False
            self.last_update = datetime.now(timezone.utc)

        if error is not None:
            raise error

        logger.debug(
            f"Loaded {monitor.entry_count()} entries in {monitor.session_count()} blocks"
        )

    @staticmethod
    def _load_path(monitor: UsageMonitor, path: Path) -> None:
        if path.is_file():
            monitor.load_data(path)
        elif path.is_dir():
            monitor.load_directory(path)
        else:
            raise NoUsageDataError(f"Path does not exist: {path}")

    @staticmethod
    def _load_discovered(monitor: UsageMonitor) -> None:
        claude_paths = discover_claude_data_paths()
        if not claude_paths:
            searched = "\n".join(f"  {p}" for p in get_standard_claude_paths())
            raise NoUsageDataError(
                f"No Claude data directories found in standard locations:\n{searched}"
            )

        last_error: Optional[DataLoadError] = None
        for claude_path in claude_paths:
            try:
                monitor.load_directory(claude_path)
            except DataLoadError as e:
                last_error = e
                continue
            if not monitor.is_empty():
                return

        if last_error is not None:
            raise last_error
        raise NoUsageDataError("No usage data found in any Claude directories")

    # Spinner

    def update_spinner(self) -> None:
        self.spinner_state = (self.spinner_state + 1) % len(SPINNER_FRAMES)

    def get_spinner_char(self) -> str:
        return SPINNER_FRAMES[self.spinner_state % len(SPINNER_FRAMES)]

    # Popups

    def toggle_popup(self, popup: PopupType) -> None:
        """Open ``popup``, or close it if it is already the open one."""
        self.active_popup = None if self.active_popup == popup else popup

    def close_popup(self) -> None:
        self.active_popup = None

    # Values shown by the widgets

    def get_usage_percentage(self) -> float:
        return self.monitor.get_current_block_percentage(self.plan)

    def get_current_tokens(self) -> int:
        return int(self.monitor.get_current_block_tokens())

    def get_burn_rate(self) -> Optional[BurnRate]:
        return self.monitor.get_current_burn_rate()

    def get_lifetime_tokens(self) -> int:
        return int(self.monitor.get_total_weighted_tokens())

    def get_lifetime_percentage(self, plan: Optional[ClaudePlan] = None) -> float:
        return self.monitor.get_plan_usage_percentage(plan or self.plan)

    def get_total_cost(self) -> float:
        return self.monitor.get_total_cost()

    def get_current_block_cost(self) -> float:
        return self.monitor.get_current_block_cost()

    def get_current_block_duration(self) -> float:
        return self.monitor.get_current_block_duration()

    def get_session_blocks_count(self) -> int:
        return self.monitor.session_count()

    def get_average_burn_rate(self) -> Optional[BurnRate]:
        return self.monitor.get_average_burn_rate()

    def get_peak_burn_rate(self) -> Optional[BurnRate]:
        return self.monitor.get_peak_burn_rate()

    def get_time_to_reset_formatted(
        self, now: Optional[datetime] = None
    ) -> Tuple[str, float]:
        """
        Time until the session window resets, and the fraction of it remaining.

        Inside an active block this is the block's end; otherwise it is the
        end of a window opening at the next full hour, with fraction 0.0.

        Returns:
            ("H:MM", fraction) with fraction at most 1.0.
        """
        now = now or datetime.now(timezone.utc)

        block = self.monitor.current_block
        if block is not None and not block.is_empty and now < block.end_time:
            remaining = (block.end_time - now).total_seconds()
            elapsed = (now - block.start_time).total_seconds()
            fraction = 1.0 - elapsed / SESSION_WINDOW.total_seconds()
            return format_clock(remaining), min(fraction, 1.0)

        next_session_end = floor_to_hour(now) + timedelta(hours=1) + SESSION_WINDOW
        return format_clock((next_session_end - now).total_seconds()), 0.0

    def searched_paths(self) -> List[str]:
        return get_standard_claude_paths()
