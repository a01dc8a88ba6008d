"""Dashboard widgets for Claude Usage.

Each function turns the current ``AppState`` into a Rich renderable. Callers
hold ``state.lock`` while rendering.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from claude_usage.ui.progress_bars import TimeProgressBar, TokenProgressBar
from claude_usage.ui.state import AppState
from claude_usage.utils.formatting import format_model_weighting, truncate
from claude_usage.utils.time_utils import TimezoneHandler

LABEL_STYLE = "white"
HINT_STYLE = "bright_black"
KEY_STYLE = "bold yellow"
ERROR_MESSAGE_LENGTH = 50


def _line(label: str, value: str, value_style: str, suffix: str = "") -> Text:
    text = Text()
    text.append(label, style=LABEL_STYLE)
    text.append(value, style=value_style)
    if suffix:
        text.append(suffix, style=HINT_STYLE)
    return text


def _usage_style(percentage: float) -> str:
    return TokenProgressBar().get_style(percentage)


def render_header(state: AppState) -> Panel:
    """Title with the plan name and, while loading, the spinner."""
    spinner = state.get_spinner_char() if state.is_loading else " "
    title = Text()
    title.append(f"Claude Usage Monitor - {state.plan.display_name}", style="bold cyan")
    title.append(" ")
    title.append(spinner, style="yellow")
    return Panel(Align.center(title), title="Status")


def render_progress_bars(
    state: AppState, now: Optional[datetime] = None, bar_width: int = 30
) -> Table:
    """Token usage of the current block next to the session window progress."""
    usage_percentage = state.get_usage_percentage()
    time_remaining, remaining_fraction = state.get_time_to_reset_formatted(now)

    token_bar = Text.from_markup(TokenProgressBar(bar_width).render(usage_percentage))
    time_bar = Text.from_markup(
        TimeProgressBar(bar_width).render(remaining_fraction, time_remaining)
    )

    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(ratio=1)
    grid.add_row(
        Panel(token_bar, title="Token Usage"),
        Panel(time_bar, title="Session Time (5h blocks)"),
    )
    return grid


def render_statistics(state: AppState, timezone_handler: TimezoneHandler) -> Panel:
    """Data status, block tokens against the plan, burn rate and last update."""
    if state.data_loaded:
        status = f"Loaded ({state.monitor.entry_count()} entries)"
    elif state.is_loading:
        status = "Loading..."
    else:
        status = "No data"
    status_style = "bold green" if state.data_loaded else "bold red"

    burn_rate = state.get_burn_rate()
    burn_rate_text = f"{burn_rate.tokens_per_minute:.1f} tokens/min" if burn_rate else "N/A"

    lines: List[Text] = [
        _line("Data Status: ", status, status_style),
        _line(
            "Tokens: ",
            str(state.get_current_tokens()),
            "bold yellow",
            suffix=f" / {state.plan.max_tokens}",
        ),
        _line("Burn Rate: ", burn_rate_text, "bold green"),
    ]

    if state.error_message:
        error = Text("Error: ", style="red")
        error.append(truncate(state.error_message, ERROR_MESSAGE_LENGTH))
        lines.append(error)
    else:
        lines.append(
            _line(
                "Last Update: ",
                timezone_handler.format_datetime(state.last_update, "%H:%M:%S %Z"),
                "cyan",
            )
        )

    return Panel(Group(*lines), title="Statistics")


def render_predictions(state: AppState, now: Optional[datetime] = None) -> Panel:
    """Time to the plan limit at the current burn rate and the session time left."""
    burn_rate = state.get_burn_rate()
    if burn_rate is None:
        return Panel(Group(*_no_data_lines(state)), title="Predictions")

    remaining_tokens = max(0, state.plan.max_tokens - state.get_current_tokens())
    if burn_rate.tokens_per_minute > 0:
        hours = remaining_tokens / burn_rate.tokens_per_minute / 60.0
    else:
        hours = 0.0

    time_to_reset, _ = state.get_time_to_reset_formatted(now)
    lines = [
        _line(
            "Estimated time to limit: ",
            f"{hours:.1f} hours" if hours > 0 else "Limit reached",
            "bold red" if hours < 1.0 else "bold green",
        ),
        _line("Session time remaining: ", time_to_reset, "bold blue"),
    ]
    return Panel(Group(*lines), title="Predictions")


def _no_data_lines(state: AppState) -> List[Text]:
    headline = (
        "No usage data in loaded files" if state.data_loaded else "No Claude usage data found"
    )
    lines = [Text(headline, style="red"), Text(" ")]
    if not state.data_loaded:
        lines.append(Text("Searched in:", style=HINT_STYLE))
        lines.extend(Text(f"  {path}", style=HINT_STYLE) for path in state.searched_paths())
    return lines


def render_shortcuts() -> Align:
    text = Text()
    shortcuts = (
        ("q", " to quit, "),
        ("r", " to refresh, "),
        ("d", " for block details, "),
        ("s", " for statistics"),
    )
    text.append("Press ", style=HINT_STYLE)
    for key, description in shortcuts:
        text.append(key, style=KEY_STYLE)
        text.append(description, style=HINT_STYLE)
    return Align.center(text)


def _model_rows(state: AppState, breakdown: Dict[str, Tuple[int, float]]) -> List[Text]:
    return [
        Text(
            "  "
            + format_model_weighting(model, tokens, state.monitor.get_model_weight(model)),
            style=LABEL_STYLE,
        )
        for model, (tokens, _cost) in sorted(breakdown.items())
    ]


def _close_hint(key: str) -> Text:
    text = Text("Press ", style=HINT_STYLE)
    text.append(key, style=KEY_STYLE)
    text.append(" to close", style=HINT_STYLE)
    return text


def render_block_popup(state: AppState) -> Panel:
    """Tokens, cost, duration and per-model weighting of the current block."""
    lines: List[RenderableType] = [
        _line("Block Tokens: ", str(state.get_current_tokens()), "bold yellow"),
        _line("Block Cost: ", f"${state.get_current_block_cost():.3f}", "bold green"),
        _line(
            "Block Duration: ",
            f"{state.get_current_block_duration():.1f} min",
            "bold cyan",
        ),
        Text(" "),
        Text("Model Breakdown:", style="bold cyan"),
        Text(" "),
    ]
    lines.extend(_model_rows(state, state.monitor.get_current_block_model_breakdown()))
    lines.extend([Text(" "), _close_hint("d")])
    return Panel(Group(*lines), title="Current Block Breakdown", border_style="cyan")


def render_lifetime_popup(state: AppState) -> Panel:
    """Totals, burn rates and per-model weighting over all loaded data."""
    percentage = state.get_lifetime_percentage()
    lines: List[RenderableType] = [
        _line("Total Tokens: ", str(state.get_lifetime_tokens()), "bold yellow"),
        _line("Usage: ", f"{percentage:.1f}%", f"bold {_usage_style(percentage)}"),
        _line("Total Cost: ", f"${state.get_total_cost():.3f}", "bold green"),
        _line("Session Blocks: ", str(state.get_session_blocks_count()), "bold cyan"),
    ]

    average = state.get_average_burn_rate()
    if average is not None:
        lines.append(
            _line(
                "Average Burn Rate: ",
                f"{average.tokens_per_minute:.1f} tokens/min",
                "bold green",
            )
        )
    peak = state.get_peak_burn_rate()
    if peak is not None:
        lines.append(
            _line("Peak Burn Rate: ", f"{peak.tokens_per_minute:.1f} tokens/min", "bold red")
        )

    lines.extend(
        [Text(" "), Text("Model Breakdown (Lifetime):", style="bold cyan"), Text(" ")]
    )
    lines.extend(_model_rows(state, state.monitor.get_model_breakdown()))
    lines.extend([Text(" "), _close_hint("s")])
    return Panel(Group(*lines), title="Session Statistics", border_style="cyan")
