"""Background refresh of the dashboard state."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

from claude_usage.data.loader import DataLoadError
from claude_usage.error_handling import report_error
from claude_usage.ui.state import AppState, NoUsageDataError

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[AppState], None]


class MonitoringOrchestrator:
    """Reloads usage data into an AppState on a fixed interval."""

    def __init__(
        self,
        state: AppState,
        update_interval: float = 5,
        data_path: Optional[Union[str, Path]] = None,
    ):
        """
        Parameters:
            state (AppState): State that receives the reloaded data.
            update_interval (float): Seconds between reloads.
            data_path (Optional[str]): File or directory to load, or None to
                use the standard Claude locations.
        """
        self.state = state
        self.update_interval = update_interval
        self.data_path = data_path

        self._monitoring = False
        self._monitor_thread: Optional[threading.Thread] = None
        self._wake_event = threading.Event()
        self._update_callbacks: List[UpdateCallback] = []
        self._first_data_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._monitoring

    def start(self) -> None:
        """Start the refresh thread; does nothing if it is already running."""
        if self._monitoring:
            logger.warning("Monitoring already running")
            return

        logger.info(f"Starting monitoring with {self.update_interval}s interval")
        self._monitoring = True
        self._wake_event.clear()

        self._monitor_thread = threading.Thread(
            target=self._monitoring_loop, name="MonitoringThread", daemon=True
        )
        self._monitor_thread.start()

    def stop(self) -> None:
        """Stop the refresh thread and wait briefly for it to finish."""
        if not self._monitoring:
            return

        logger.info("Stopping monitoring")
        self._monitoring = False
        self._wake_event.set()

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=5)

        self._monitor_thread = None
        self._first_data_event.clear()

    def register_update_callback(self, callback: UpdateCallback) -> None:
        """Call ``callback(state)`` after every reload. Duplicates are ignored."""
        if callback not in self._update_callbacks:
            self._update_callbacks.append(callback)
            logger.debug("Registered update callback")

    def force_refresh(self) -> bool:
        """Reload right away on the calling thread. Returns True on success."""
        return self._refresh()

    def request_refresh(self) -> None:
        """Ask the refresh thread to reload now instead of at the next interval."""
        with self.state.lock:
            self.state.is_loading = True
        self._wake_event.set()

    def wait_for_initial_data(self, timeout: float = 10.0) -> bool:
        """Block until the first reload has finished, successful or not."""
        return self._first_data_event.wait(timeout=timeout)

    def _monitoring_loop(self) -> None:
        logger.info("Monitoring loop started")

        self._refresh()

        while self._monitoring:
            self._wake_event.wait(timeout=self.update_interval)
            self._wake_event.clear()
            if not self._monitoring:
                break
            self._refresh()

        logger.info("Monitoring loop ended")

    def _refresh(self) -> bool:
        start_time = time.time()
        success = False
        try:
            self.state.load_data(self.data_path)
            success = True
        except (NoUsageDataError, DataLoadError) as e:
            # Already recorded on the state and shown by the dashboard
            logger.debug(f"Reload failed: {e}")
        except Exception as e:
            logger.error(f"Error in monitoring cycle: {e}", exc_info=True)
            report_error(
                exception=e, component="orchestrator", context_name="monitoring_cycle"
            )
            with self.state.lock:
                self.state.is_loading = False
                self.state.error_message = str(e)

        self._first_data_event.set()

        for callback in self._update_callbacks:
            try:
                callback(self.state)
            except Exception as e:
                logger.error(f"Callback error: {e}", exc_info=True)
                report_error(
                    exception=e,
                    component="orchestrator",
                    context_name="callback_error",
                )

        logger.debug(f"Refresh completed in {time.time() - start_time:.3f}s")
        return success
