"""Usage monitor facade for Claude Usage.

``UsageMonitor`` owns the loaded entries and their session blocks and answers
every question the report and the live dashboard ask about them.
"""

import bisect
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from claude_usage.core.calculator import Calculator
from claude_usage.core.models import (
    BurnRate,
    ClaudePlan,
    SessionBlock,
    UsageEntry,
    UsageProjection,
    aggregate_by_model,
)
from claude_usage.core.pricing import PricingProvider
from claude_usage.data.identifier import SessionIdentifier
from claude_usage.data.loader import DataLoader

logger = logging.getLogger(__name__)


class UsageMonitor:
    """Holds usage entries and derives session blocks, rates and totals."""

    def __init__(
        self,
        pricing_provider: Optional[PricingProvider] = None,
        loader: Optional[DataLoader] = None,
    ) -> None:
        self.pricing_provider = pricing_provider or PricingProvider()
        self.calculator = Calculator()
        self.identifier = SessionIdentifier()
        self.loader = loader or DataLoader(pricing_provider=self.pricing_provider)
        self._entries: List[UsageEntry] = []
        self._blocks: List[SessionBlock] = []

    # Loading

    def load_data(self, path: Union[str, Path]) -> None:
        """Replace the current entries with those of a single JSONL file."""
        entries = self.loader.load_from_file(path)
        self._entries = sorted(entries, key=lambda e: e.timestamp)
        self._recalculate_blocks()

    def load_directory(self, dir_path: Union[str, Path]) -> None:
        """Replace the current entries with every entry found below a directory."""
        self._entries = self.loader.load_from_directory(dir_path)
        self._recalculate_blocks()

    def add_entry(self, entry: UsageEntry) -> None:
        """Insert an entry keeping timestamp order, then rebuild the blocks."""
        keys = [e.timestamp for e in self._entries]
        self._entries.insert(bisect.bisect_right(keys, entry.timestamp), entry)
        self._recalculate_blocks()

    def clear_data(self) -> None:
        self._entries = []
        self._blocks = []

    def _recalculate_blocks(self) -> None:
        self._blocks = self.identifier.identify_blocks(self._entries)
        logger.debug(
            f"Recalculated {len(self._blocks)} blocks from {len(self._entries)} entries"
        )

    # Accessors

    @property
    def session_blocks(self) -> List[SessionBlock]:
        return self._blocks

    @property
    def usage_entries(self) -> List[UsageEntry]:
        return self._entries

    def session_count(self) -> int:
        return len(self._blocks)

    def entry_count(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    @property
    def current_block(self) -> Optional[SessionBlock]:
        """The most recent session block, if any."""
        return self._blocks[-1] if self._blocks else None

    # Rates and projections

    def get_current_burn_rate(self) -> Optional[BurnRate]:
        """Weighted burn rate of the most recent block."""
        block = self.current_block
        if block is None:
            return None
        return self.calculator.calculate_weighted_burn_rate(
            block, self.pricing_provider
        )

    def get_burn_rate_for_block(self, block_index: int) -> Optional[BurnRate]:
        block = self._block_at(block_index)
        if block is None:
            return None
        return self.calculator.calculate_burn_rate(block)

    def project_usage(
        self, block_index: int, current_time: datetime
    ) -> Optional[UsageProjection]:
        block = self._block_at(block_index)
        if block is None:
            return None
        return self.calculator.project_block_usage(block, current_time)

    def project_current_usage(self, current_time: datetime) -> Optional[UsageProjection]:
        if not self._blocks:
            return None
        return self.project_usage(len(self._blocks) - 1, current_time)

    def calculate_hourly_burn_rate(self, current_time: datetime) -> float:
        """Weighted tokens per minute over the hour before ``current_time``."""
        return self.calculator.calculate_weighted_hourly_burn_rate(
            self._blocks, current_time, self.pricing_provider
        )

    def calculate_tokens_per_second(self, current_time: datetime) -> float:
        return self.calculate_hourly_burn_rate(current_time) / 60.0

    def get_average_burn_rate(self) -> Optional[BurnRate]:
        return self.calculator.calculate_average_burn_rate(self._blocks)

    def get_peak_burn_rate(self) -> Optional[BurnRate]:
        return self.calculator.calculate_peak_burn_rate(self._blocks)

    def _block_at(self, block_index: int) -> Optional[SessionBlock]:
        if 0 <= block_index < len(self._blocks):
            return self._blocks[block_index]
        return None

    # Totals

    def get_total_cost(self) -> float:
        return self.calculator.calculate_total_cost(self._blocks)

    def get_total_tokens(self) -> int:
        return self.calculator.calculate_total_tokens(self._blocks)

    def get_model_breakdown(self) -> Dict[str, Tuple[int, float]]:
        """Lifetime (total_tokens, cost_usd) per model."""
        return aggregate_by_model(self._entries)

    def get_weighted_tokens(self, model: str) -> float:
        weight = self.pricing_provider.get_model_weight(model)
        return sum(
            self.calculator.calculate_weighted_tokens(entry, weight)
            for entry in self._entries
            if entry.model == model
        )

    def get_total_weighted_tokens(self) -> float:
        return self._weighted_tokens(self._entries)

    def _weighted_tokens(self, entries: List[UsageEntry]) -> float:
        return sum(
            self.calculator.calculate_weighted_tokens(
                entry, self.pricing_provider.get_model_weight(entry.model)
            )
            for entry in entries
        )

    # Current block

    def get_current_block_tokens(self) -> float:
        """Weighted tokens used in the most recent block."""
        block = self.current_block
        return self._weighted_tokens(block.entries) if block else 0.0

    def get_current_block_percentage(self, plan: ClaudePlan) -> float:
        return self.get_current_block_tokens() / plan.max_tokens * 100.0

    def get_current_block_cost(self) -> float:
        block = self.current_block
        return block.cost_usd if block else 0.0

    def get_current_block_duration(self) -> float:
        """Active minutes of the most recent block."""
        block = self.current_block
        return block.duration_minutes if block else 0.0

    def get_current_block_model_breakdown(self) -> Dict[str, Tuple[int, float]]:
        block = self.current_block
        return block.model_breakdown() if block else {}

    # Limits

    def estimate_time_to_limit(self, token_limit: int) -> Optional[timedelta]:
        """
        Time until ``token_limit`` weighted tokens are used at the current burn rate.

        Returns None without data, without a burn rate, or when the limit is
        already exceeded.
        """
        burn_rate = self.get_current_burn_rate()
        if burn_rate is None:
            return None

        current_tokens = int(self.get_total_weighted_tokens())
        return self.calculator.calculate_time_to_limit(
            current_tokens, token_limit, burn_rate.tokens_per_minute
        )

    def estimate_time_to_plan_limit(self, plan: ClaudePlan) -> Optional[timedelta]:
        return self.estimate_time_to_limit(plan.max_tokens)

    def get_plan_usage_percentage(self, plan: ClaudePlan) -> float:
        return self.get_total_weighted_tokens() / plan.max_tokens * 100.0

    # Pricing passthroughs

    def get_supported_models(self) -> List[str]:
        return self.pricing_provider.supported_models()

    def get_model_weight(self, model: str) -> float:
        return self.pricing_provider.get_model_weight(model)

    def calculate_cost_for_tokens(
        self, model: str, input_tokens: int, output_tokens: int
    ) -> Optional[float]:
        return self.pricing_provider.calculate_cost(model, input_tokens, output_tokens)

    # Session queries

    def get_active_sessions(self, current_time: datetime) -> List[SessionBlock]:
        """Non-empty blocks whose window contains ``current_time``."""
        return [
            block
            for block in self._blocks
            if not block.is_empty and block.start_time <= current_time < block.end_time
        ]

    def get_sessions_in_range(
        self, start: datetime, end: datetime
    ) -> List[SessionBlock]:
        """Non-empty blocks whose window overlaps ``[start, end)``."""
        return [
            block
            for block in self._blocks
            if not block.is_empty and block.start_time < end and block.end_time > start
        ]
