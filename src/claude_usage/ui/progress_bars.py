"""Progress bar components for Claude Usage.

Token usage and session time bars for the dashboard, plus the plain
text usage bar of the report.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Tuple, Union

ProgressPercentage = float
ProgressSegments = int
ProgressWidth = int
ProgressValue = Union[int, float]

FILLED_CHAR = "█"
EMPTY_CHAR = "░"


class BaseProgressBar(ABC):
    """Base class for fixed-width bars built from block characters."""

    def __init__(self, width: ProgressWidth = 40) -> None:
        """Initialize base progress bar.

        Args:
            width: Width of the bar in characters
        """
        self.width: ProgressWidth = width
        self._validate_width()

    def _validate_width(self) -> None:
        if self.width < 10:
            raise ValueError("Progress bar width must be at least 10 characters")
        if self.width > 200:
            raise ValueError("Progress bar width must not exceed 200 characters")

    def _calculate_filled_segments(
        self, percentage: ProgressPercentage, max_value: ProgressPercentage = 100.0
    ) -> ProgressSegments:
        """Calculate number of filled segments based on percentage.

        Args:
            percentage: Current percentage value
            max_value: Maximum percentage value (default 100)

        Returns:
            Number of filled segments, between 0 and the bar width
        """
        bounded_percentage: ProgressPercentage = max(0.0, min(percentage, max_value))
        return int(self.width * bounded_percentage / max_value)

    def _render_bar(
        self,
        filled: ProgressSegments,
        filled_style: str = "",
        empty_style: str = "",
    ) -> str:
        """Render the bar, wrapping each part in Rich markup when a style is given."""
        filled_bar: str = FILLED_CHAR * filled
        empty_bar: str = EMPTY_CHAR * (self.width - filled)

        if filled_style and filled_bar:
            filled_bar = f"[{filled_style}]{filled_bar}[/]"
        if empty_style and empty_bar:
            empty_bar = f"[{empty_style}]{empty_bar}[/]"

        return f"{filled_bar}{empty_bar}"

    @abstractmethod
    def render(self, *args: Any, **kwargs: Any) -> str:
        """Render the progress bar."""


class TokenProgressBar(BaseProgressBar):
    """Token usage bar coloured by how close the plan allowance is."""

    def __init__(self, width: ProgressWidth = 40) -> None:
        super().__init__(width)

        # Checked in order; strictly greater than the threshold
        self._thresholds: List[Tuple[ProgressPercentage, str]] = [
            (80.0, "red"),
            (60.0, "yellow"),
        ]
        self._default_style = "green"

    def get_style(self, percentage: ProgressPercentage) -> str:
        """Colour for a usage percentage: red above 80, yellow above 60, else green."""
        for threshold, style in self._thresholds:
            if percentage > threshold:
                return style
        return self._default_style

    def render(self, percentage: ProgressPercentage) -> str:
        """Render the bar and percentage label.

        Args:
            percentage: Usage percentage (may exceed 100; the bar is capped)

        Returns:
            Bar with Rich markup followed by the percentage, e.g. '███░░ 60.0%'
        """
        filled = self._calculate_filled_segments(percentage)
        bar = self._render_bar(
            filled, filled_style=self.get_style(percentage), empty_style="bright_black"
        )
        return f"{bar} {percentage:.1f}%"


class TimeProgressBar(BaseProgressBar):
    """Elapsed share of the current session window."""

    def render(self, remaining_fraction: float, remaining_label: str) -> str:
        """Render the elapsed part of the window.

        Args:
            remaining_fraction: Share of the window still left (1.0 = just started)
            remaining_label: Remaining time, e.g. '3:05'

        Returns:
            Bar with Rich markup followed by '<label> remaining'
        """
        elapsed_percentage = (1.0 - remaining_fraction) * 100.0
        filled = self._calculate_filled_segments(elapsed_percentage)
        bar = self._render_bar(filled, filled_style="blue", empty_style="bright_black")
        return f"{bar} {remaining_label} remaining"


class PlanUsageBar(BaseProgressBar):
    """Unstyled bar used by the text report; full once the plan is exceeded."""

    def __init__(self, width: ProgressWidth = 20) -> None:
        super().__init__(width)

    def render(self, percentage: ProgressPercentage) -> str:
        return self._render_bar(self._calculate_filled_segments(percentage))
