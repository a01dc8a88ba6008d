"""Live dashboard for Claude Usage.

Redraws the widgets with Rich ``Live`` while the orchestrator reloads data in
the background, and maps key presses to actions.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from rich.align import Align
from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from claude_usage.monitoring.orchestrator import MonitoringOrchestrator
from claude_usage.terminal.manager import (
    KEY_ESCAPE,
    read_key,
    restore_terminal,
    setup_terminal,
)
from claude_usage.ui.state import AppState, PopupType
from claude_usage.ui.widgets import (
    render_block_popup,
    render_header,
    render_lifetime_popup,
    render_predictions,
    render_progress_bars,
    render_shortcuts,
    render_statistics,
)
from claude_usage.utils.time_utils import TimezoneHandler

logger = logging.getLogger(__name__)

POPUP_KEYS = {"d": PopupType.CURRENT_BLOCK, "s": PopupType.LIFETIME_STATS}


class DisplayController:
    """Renders the dashboard and handles keyboard input."""

    def __init__(
        self,
        state: AppState,
        orchestrator: MonitoringOrchestrator,
        timezone_handler: Optional[TimezoneHandler] = None,
        refresh_per_second: float = 10.0,
        console: Optional[Console] = None,
    ):
        self.state = state
        self.orchestrator = orchestrator
        self.timezone_handler = timezone_handler or TimezoneHandler()
        self.refresh_per_second = refresh_per_second
        self.console = console or Console()
        self._exit = False

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.refresh_per_second

    def build_renderable(self, now: Optional[datetime] = None) -> Layout:
        """Compose the full screen for the current state."""
        now = now or datetime.now(timezone.utc)

        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="progress", size=3),
            Layout(name="statistics", size=6),
            Layout(name="body", minimum_size=5),
            Layout(name="shortcuts", size=1),
        )

        with self.state.lock:
            layout["header"].update(render_header(self.state))
            layout["progress"].update(render_progress_bars(self.state, now))
            layout["statistics"].update(
                render_statistics(self.state, self.timezone_handler)
            )
            layout["body"].update(self._render_body(now))
            layout["shortcuts"].update(render_shortcuts())

        return layout

    def _render_body(self, now: datetime):
        if self.state.active_popup == PopupType.CURRENT_BLOCK:
            return Align.center(render_block_popup(self.state), width=60)
        if self.state.active_popup == PopupType.LIFETIME_STATS:
            return Align.center(render_lifetime_popup(self.state), width=60)
        return render_predictions(self.state, now)

    def handle_key(self, key: Optional[str]) -> None:
        """Apply a key press: q quits, r reloads, d and s toggle popups, Esc closes."""
        if key is None:
            return

        key = key if key == KEY_ESCAPE else key.lower()
        if key == "q":
            self._exit = True
        elif key == "r":
            logger.debug("Manual refresh requested")
            self.orchestrator.request_refresh()
        elif key in POPUP_KEYS:
            with self.state.lock:
                self.state.toggle_popup(POPUP_KEYS[key])
        elif key == KEY_ESCAPE:
            with self.state.lock:
                self.state.close_popup()

    def tick(self) -> None:
        with self.state.lock:
            self.state.update_spinner()

    def run(self) -> None:
        """Run the dashboard until the user quits."""
        self._exit = False
        old_settings = setup_terminal()

        with self.state.lock:
            self.state.is_loading = True
        self.orchestrator.start()

        try:
            with Live(
                self.build_renderable(),
                console=self.console,
                screen=True,
                auto_refresh=False,
            ) as live:
                while not self._exit:
                    self.tick()
                    live.update(self.build_renderable(), refresh=True)
                    self.handle_key(read_key(timeout=self.tick_interval))
        finally:
            self.orchestrator.stop()
            restore_terminal(old_settings)
