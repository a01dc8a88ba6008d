"""Data models for Claude Usage.
Core data structures for usage tracking, session blocks, and token calculations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Tuple


class ClaudePlan(Enum):
    """Claude subscription plans with their token allowances."""

    PRO = "pro"
    MAX5 = "max5"
    MAX20 = "max20"

    @classmethod
    def from_string(cls, value: str) -> "ClaudePlan":
        """Case-insensitive creation of ClaudePlan from a string."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown plan type: {value}")

    @property
    def max_tokens(self) -> int:
        """Token allowance of the plan."""
        return PLAN_LIMITS[self]["max_tokens"]

    @property
    def display_name(self) -> str:
        return PLAN_LIMITS[self]["display_name"]

    @property
    def description(self) -> str:
        """Display name with the approximate allowance, e.g. 'Claude Pro (~44K tokens/day)'."""
        return f"{self.display_name} (~{self.max_tokens // 1_000}K tokens/day)"


PLAN_LIMITS: Dict[ClaudePlan, Dict[str, Any]] = {
    ClaudePlan.PRO: {"max_tokens": 44_000, "display_name": "Claude Pro"},
    ClaudePlan.MAX5: {"max_tokens": 220_000, "display_name": "Claude Max 5"},
    ClaudePlan.MAX20: {"max_tokens": 880_000, "display_name": "Claude Max 20"},
}


def _format_timestamp(timestamp: datetime) -> str:
    """Render a datetime as an RFC 3339 UTC string with a 'Z' suffix."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class UsageEntry:
    """Individual usage record from Claude usage data."""

    timestamp: datetime
    model: str
    input_tokens: int
    output_tokens: int
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0

    @property
    def total_tokens(self) -> int:
        """Input plus output tokens; cache traffic is not counted."""
        return self.input_tokens + self.output_tokens

    @property
    def all_tokens(self) -> int:
        """Sum of all four token kinds, cache creation and cache reads included."""
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_tokens
            + self.cache_read_tokens
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the entry to the simple JSONL record format.

        The result is accepted by ``DataLoader.parse_line`` after ``json.dumps``
        and yields an equal entry.
        """
        return {
            "timestamp": _format_timestamp(self.timestamp),
            "model": self.model,
            "usage": {
                "input_tokens": self.input_tokens,
                "output_tokens": self.output_tokens,
                "cache_creation_input_tokens": self.cache_creation_tokens,
                "cache_read_input_tokens": self.cache_read_tokens,
            },
            "cost_usd": self.cost_usd,
        }


@dataclass
class TokenCounts:
    """Token aggregation structure with computed totals."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0

    def add_entry(self, entry: UsageEntry) -> None:
        """Accumulate the token counts of a single usage entry."""
        self.input_tokens += entry.input_tokens
        self.output_tokens += entry.output_tokens
        self.cache_creation_tokens += entry.cache_creation_tokens
        self.cache_read_tokens += entry.cache_read_tokens

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def all_tokens(self) -> int:
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_tokens
            + self.cache_read_tokens
        )


@dataclass
class BurnRate:
    """Token consumption rate metrics."""

    tokens_per_minute: float
    cost_per_hour: float

    @property
    def tokens_per_second(self) -> float:
        return self.tokens_per_minute / 60.0


@dataclass
class UsageProjection:
    """Usage projection for a block if the current burn rate continues."""

    current_tokens: int
    current_cost: float
    projected_additional_tokens: int
    projected_additional_cost: float
    projected_total_tokens: int = field(init=False)
    projected_total_cost: float = field(init=False)

    def __post_init__(self) -> None:
        self.projected_total_tokens = (
            self.current_tokens + self.projected_additional_tokens
        )
        self.projected_total_cost = self.current_cost + self.projected_additional_cost


@dataclass
class SessionBlock:
    """Aggregated session block covering one 5-hour window."""

    start_time: datetime
    end_time: datetime
    entries: List[UsageEntry] = field(default_factory=list)
    token_counts: TokenCounts = field(default_factory=TokenCounts)
    cost_usd: float = 0.0
    duration_minutes: float = 0.0

    @property
    def id(self) -> str:
        return self.start_time.isoformat()

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def total_tokens(self) -> int:
        return self.token_counts.total_tokens

    @property
    def first_timestamp(self) -> datetime:
        return self.entries[0].timestamp

    @property
    def last_timestamp(self) -> datetime:
        return self.entries[-1].timestamp

    def add_entry(self, entry: UsageEntry) -> None:
        """
        Add a usage entry to the block, updating token counts, cost and duration.
        """
        self.token_counts.add_entry(entry)
        self.cost_usd += entry.cost_usd
        self.entries.append(entry)
        self.update_duration()

    def update_duration(self) -> None:
        """
        Recompute the active duration from the first and last entry.

        A block whose entries all share one timestamp counts as one minute long
        so rates derived from it stay finite.
        """
        if not self.entries:
            return

        elapsed = (self.last_timestamp - self.first_timestamp).total_seconds()
        self.duration_minutes = elapsed / 60.0
        if self.duration_minutes == 0.0:
            self.duration_minutes = 1.0

    def model_breakdown(self) -> Dict[str, Tuple[int, float]]:
        """Per-model (total_tokens, cost_usd) for the entries of this block."""
        return aggregate_by_model(self.entries)


def aggregate_by_model(entries: List[UsageEntry]) -> Dict[str, Tuple[int, float]]:
    """
    Sum total tokens and cost per model name.

    Parameters:
        entries (List[UsageEntry]): Entries to aggregate.

    Returns:
        Dict[str, Tuple[int, float]]: Mapping of model name to (tokens, cost).
    """
    breakdown: Dict[str, Tuple[int, float]] = {}
    for entry in entries:
        tokens, cost = breakdown.get(entry.model, (0, 0.0))
        breakdown[entry.model] = (tokens + entry.total_tokens, cost + entry.cost_usd)
    return breakdown


@dataclass(frozen=True)
class ModelPricing:
    """Per-token prices for one model."""

    input_cost_per_token: float
    output_cost_per_token: float
    cache_creation_input_token_cost: float
    cache_read_input_token_cost: float

    def calculate_cost(
        self,
        input_tokens: int,
        output_tokens: int,
        cache_creation_tokens: int = 0,
        cache_read_tokens: int = 0,
    ) -> float:
        """
        Calculate the USD cost of the given token counts, rounded to six decimal places.
        """
        cost = (
            input_tokens * self.input_cost_per_token
            + output_tokens * self.output_cost_per_token
            + cache_creation_tokens * self.cache_creation_input_token_cost
            + cache_read_tokens * self.cache_read_input_token_cost
        )
        return round(cost, 6)
