"""Formatting utilities for Claude Usage.

Number, model and duration formatting shared by the report and
the live dashboard.
"""

from datetime import timedelta
from typing import Optional

from claude_usage.utils.time_utils import split_duration

MODEL_FAMILIES = (("opus", "Opus"), ("sonnet", "Sonnet"), ("haiku", "Haiku"))


def format_number(value: float) -> str:
    """Format a token count with thousands separators (e.g., 1234567 -> '1,234,567')."""
    return f"{int(value):,}"


def format_weight(weight: float) -> str:
    """Render a model weight compactly: 5.0 -> '5', 0.2 -> '0.2'."""
    return f"{weight:g}"


def get_model_family(model: str) -> Optional[str]:
    """Display name of the model family ('Opus', 'Sonnet', 'Haiku'), if known."""
    lowered = model.lower()
    for marker, family in MODEL_FAMILIES:
        if marker in lowered:
            return family
    return None


def format_model_weighting(model: str, raw_tokens: int, weight: float) -> str:
    """
    Describe how a model's raw tokens count against the plan.

    Example: 'Opus: 1000 → 5000 (×5)'. Models outside the known families
    are shown by their full identifier.
    """
    label = get_model_family(model) or model
    weighted = int(raw_tokens * weight)
    return f"{label}: {raw_tokens} → {weighted} (×{format_weight(weight)})"


def format_duration(duration: timedelta) -> str:
    """Format a duration as '2d 3h 5m', '3h 5m' or '5m'."""
    days, hours, minutes = split_duration(duration)
    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def truncate(text: str, max_length: int = 50) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with '...'."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
