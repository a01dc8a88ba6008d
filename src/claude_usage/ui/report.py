"""One-off text report of loaded usage data (``--report``)."""

from datetime import datetime, timezone
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from claude_usage.core.models import ClaudePlan
from claude_usage.monitoring.monitor import UsageMonitor
from claude_usage.ui.progress_bars import PlanUsageBar
from claude_usage.utils.formatting import format_duration, format_number
from claude_usage.utils.time_utils import TimezoneHandler

SECTION_STYLE = "bold cyan"


def detect_plan(total_tokens: int) -> ClaudePlan:
    """Smallest plan whose allowance is not exceeded by ``total_tokens``."""
    if total_tokens > ClaudePlan.MAX5.max_tokens:
        return ClaudePlan.MAX20
    if total_tokens > ClaudePlan.PRO.max_tokens:
        return ClaudePlan.MAX5
    return ClaudePlan.PRO


def build_report(
    monitor: UsageMonitor,
    now: Optional[datetime] = None,
    timezone_handler: Optional[TimezoneHandler] = None,
    verbose: bool = False,
) -> List[str]:
    """
    Build the report as plain text lines.

    Section headers are the lines wrapped in '--- ... ---'.

    Parameters:
        monitor: Monitor holding the loaded data.
        now: Reference time for rates and projections (default: current UTC time).
        timezone_handler: Timezone used for printed times (default UTC).
        verbose: Include one line per session block.
    """
    now = now or datetime.now(timezone.utc)
    tz = timezone_handler or TimezoneHandler()

    lines = [
        f"Loaded {monitor.entry_count()} entries across "
        f"{monitor.session_count()} sessions"
    ]
    if monitor.is_empty():
        lines.append("No usage data found.")
        return lines

    lines.extend(_overall_section(monitor))
    lines.extend(_rates_section(monitor, now))
    lines.extend(_projection_section(monitor, now))
    if verbose:
        lines.extend(_blocks_section(monitor, tz))
    lines.extend(_models_section(monitor))
    lines.extend(_plan_section(monitor, now, tz))
    return lines


def _overall_section(monitor: UsageMonitor) -> List[str]:
    lines = [
        "",
        "--- Overall Statistics ---",
        f"Total tokens: {monitor.get_total_tokens()}",
        f"Total cost: ${monitor.get_total_cost():.6f}",
        f"Total weighted tokens: {monitor.get_total_weighted_tokens():.2f}",
    ]
    average = monitor.get_average_burn_rate()
    if average is not None:
        lines.append(
            f"Average burn rate: {average.tokens_per_minute:.2f} tokens/minute, "
            f"${average.cost_per_hour:.4f}/hour"
        )
    peak = monitor.get_peak_burn_rate()
    if peak is not None:
        lines.append(
            f"Peak burn rate: {peak.tokens_per_minute:.2f} tokens/minute, "
            f"${peak.cost_per_hour:.4f}/hour"
        )
    return lines


def _rates_section(monitor: UsageMonitor, now: datetime) -> List[str]:
    lines = [
        "",
        "--- Current Rates ---",
        f"Hourly burn rate: {monitor.calculate_hourly_burn_rate(now):.2f} tokens/minute",
        f"Tokens per second: {monitor.calculate_tokens_per_second(now):.4f}",
    ]
    current = monitor.get_current_burn_rate()
    if current is not None:
        lines.append(
            f"Current session burn rate: {current.tokens_per_minute:.2f} tokens/minute, "
            f"${current.cost_per_hour:.4f}/hour"
        )
    return lines


def _projection_section(monitor: UsageMonitor, now: datetime) -> List[str]:
    projection = monitor.project_current_usage(now)
    if projection is None:
        return []
    return [
        "",
        "--- Current Session Projection ---",
        f"Current tokens: {projection.current_tokens}",
        f"Current cost: ${projection.current_cost:.6f}",
        f"Projected additional tokens: {projection.projected_additional_tokens}",
        f"Projected additional cost: ${projection.projected_additional_cost:.6f}",
        f"Projected total tokens: {projection.projected_total_tokens}",
        f"Projected total cost: ${projection.projected_total_cost:.6f}",
    ]


def _blocks_section(monitor: UsageMonitor, tz: TimezoneHandler) -> List[str]:
    lines = ["", "--- Session Blocks ---"]
    for index, block in enumerate(monitor.session_blocks):
        burn_rate = monitor.get_burn_rate_for_block(index)
        rate = f"{burn_rate.tokens_per_minute:.2f} tokens/minute" if burn_rate else "N/A"
        lines.append(
            f"{tz.format_datetime(block.start_time)}: {len(block.entries)} entries, "
            f"{format_number(block.total_tokens)} tokens, ${block.cost_usd:.6f}, {rate}"
        )
    return lines


def _models_section(monitor: UsageMonitor) -> List[str]:
    lines = ["", "--- Model Breakdown ---"]
    for model, (tokens, cost) in sorted(monitor.get_model_breakdown().items()):
        lines.append(f"{model}: {tokens} tokens, ${cost:.6f}")

    lines.extend(["", "--- Supported Models ---"])
    lines.extend(f"- {model}" for model in monitor.get_supported_models())
    return lines


def _plan_section(
    monitor: UsageMonitor, now: datetime, tz: TimezoneHandler
) -> List[str]:
    current_tokens = monitor.get_total_tokens()
    detected = detect_plan(current_tokens)
    bar = PlanUsageBar()

    lines = [
        "",
        "--- Claude Plan Usage Analysis ---",
        f"Auto-detected plan: {detected.description} (based on current usage)",
        "",
    ]

    for plan in ClaudePlan:
        percentage = monitor.get_plan_usage_percentage(plan)
        lines.append(f"{plan.description}:")

        if current_tokens < plan.max_tokens:
            time_to_limit = monitor.estimate_time_to_plan_limit(plan)
            if time_to_limit is not None:
                lines.append(f"  Time remaining: {format_duration(time_to_limit)}")
                lines.append(
                    "  Will be reached at: "
                    + tz.format_datetime(now + time_to_limit, "%Y-%m-%d %H:%M %Z")
                )
        else:
            lines.append(f"  Status: EXCEEDED ({percentage - 100.0:.1f}% over limit)")

        marker = " ← DETECTED" if plan == detected else ""
        lines.append(
            f"  Usage: [{bar.render(percentage)}] {percentage:.1f}% "
            f"({format_number(current_tokens)}/{format_number(plan.max_tokens)}){marker}"
        )
        lines.append("")

    return lines


def print_report(lines: List[str], console: Optional[Console] = None) -> None:
    """Print report lines, highlighting the section headers."""
    console = console or Console()
    for line in lines:
        if line.startswith("--- "):
            console.print(Text(line, style=SECTION_STYLE))
        else:
            console.print(Text(line), highlight=False)
