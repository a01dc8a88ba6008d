"""Burn rate, projection and total calculations for Claude Usage."""

import logging
from datetime import datetime, timedelta
from typing import Final, List, Optional, Sequence

from claude_usage.core.models import (
    BurnRate,
    SessionBlock,
    UsageEntry,
    UsageProjection,
)
from claude_usage.core.pricing import PricingProvider

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR: Final[int] = 60
SECONDS_PER_MINUTE: Final[int] = 60
HOURLY_WINDOW: Final[timedelta] = timedelta(hours=1)


class Calculator:
    """Calculator for burn rates, usage projections and aggregate totals.

    All methods are pure functions of their arguments; the calculator keeps no
    state between calls.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def calculate_burn_rate(self, block: SessionBlock) -> Optional[BurnRate]:
        """Calculate the consumption rate of a block from its raw token totals.

        Args:
            block: Session block containing usage data

        Returns:
            BurnRate in tokens/minute and USD/hour, or None for an empty block
        """
        if block.is_empty or block.duration_minutes == 0.0:
            return None

        return self._rate(block, float(block.token_counts.total_tokens))

    def calculate_weighted_burn_rate(
        self, block: SessionBlock, pricing_provider: PricingProvider
    ) -> Optional[BurnRate]:
        """Calculate the consumption rate of a block with per-model token weights.

        Args:
            block: Session block containing usage data
            pricing_provider: Source of the model weights

        Returns:
            Weighted BurnRate, or None for an empty block
        """
        if block.is_empty or block.duration_minutes == 0.0:
            return None

        weighted_tokens = self._weighted_block_tokens(block, pricing_provider)
        return self._rate(block, weighted_tokens)

    def _rate(self, block: SessionBlock, tokens: float) -> BurnRate:
        duration = block.duration_minutes
        tokens_per_minute = tokens / duration
        cost_per_hour = (block.cost_usd / duration) * MINUTES_PER_HOUR

        self._logger.debug(
            f"Burn rate for block {block.id}: {tokens_per_minute:.2f} tokens/min, "
            f"${cost_per_hour:.4f}/hour over {duration:.2f}min"
        )
        return BurnRate(tokens_per_minute=tokens_per_minute, cost_per_hour=cost_per_hour)

    def _weighted_block_tokens(
        self, block: SessionBlock, pricing_provider: PricingProvider
    ) -> float:
        return sum(
            self.calculate_weighted_tokens(
                entry, pricing_provider.get_model_weight(entry.model)
            )
            for entry in block.entries
        )

    def project_block_usage(
        self, block: SessionBlock, current_time: datetime
    ) -> Optional[UsageProjection]:
        """Project the block's totals at its end if the current rate continues.

        Args:
            block: Session block to project
            current_time: Reference time for the remaining duration

        Returns:
            UsageProjection, or None if the block is empty or already over
        """
        if block.is_empty or current_time >= block.end_time:
            return None

        burn_rate = self.calculate_burn_rate(block)
        if burn_rate is None:
            return None

        remaining_minutes = (
            block.end_time - current_time
        ).total_seconds() / SECONDS_PER_MINUTE
        remaining_hours = remaining_minutes / MINUTES_PER_HOUR

        return UsageProjection(
            current_tokens=block.token_counts.total_tokens,
            current_cost=block.cost_usd,
            projected_additional_tokens=int(
                burn_rate.tokens_per_minute * remaining_minutes
            ),
            projected_additional_cost=burn_rate.cost_per_hour * remaining_hours,
        )

    def calculate_hourly_burn_rate(
        self, blocks: Sequence[SessionBlock], current_time: datetime
    ) -> float:
        """Tokens per minute across all blocks active during the last hour.

        Each block contributes its tokens in proportion to how much of its
        first-to-last-entry span overlaps the hour before ``current_time``.
        """
        return self._hourly_rate(
            blocks, current_time, lambda block: float(block.token_counts.total_tokens)
        )

    def calculate_weighted_hourly_burn_rate(
        self,
        blocks: Sequence[SessionBlock],
        current_time: datetime,
        pricing_provider: PricingProvider,
    ) -> float:
        """Like calculate_hourly_burn_rate, with per-model token weights."""
        return self._hourly_rate(
            blocks,
            current_time,
            lambda block: self._weighted_block_tokens(block, pricing_provider),
        )

    def _hourly_rate(self, blocks, current_time: datetime, block_tokens) -> float:
        one_hour_ago = current_time - HOURLY_WINDOW
        total_tokens = 0.0

        for block in blocks:
            if block.is_empty:
                continue

            block_start = block.first_timestamp
            block_end = block.last_timestamp
            if block_end < one_hour_ago or block_start > current_time:
                continue

            overlap_start = max(block_start, one_hour_ago)
            overlap_end = min(block_end, current_time)
            overlap_minutes = (
                overlap_end - overlap_start
            ).total_seconds() / SECONDS_PER_MINUTE

            if overlap_minutes > 0 and block.duration_minutes > 0:
                total_tokens += block_tokens(block) * (
                    overlap_minutes / block.duration_minutes
                )

        return total_tokens / MINUTES_PER_HOUR

    def calculate_weighted_tokens(self, entry: UsageEntry, model_weight: float) -> float:
        return entry.total_tokens * model_weight

    def calculate_total_cost(self, blocks: Sequence[SessionBlock]) -> float:
        return sum(block.cost_usd for block in blocks)

    def calculate_total_tokens(self, blocks: Sequence[SessionBlock]) -> int:
        return sum(block.token_counts.total_tokens for block in blocks)

    def calculate_average_burn_rate(
        self, blocks: Sequence[SessionBlock]
    ) -> Optional[BurnRate]:
        """Mean of the per-block burn rates, skipping blocks without one."""
        burn_rates = self._block_burn_rates(blocks)
        if not burn_rates:
            return None

        count = len(burn_rates)
        return BurnRate(
            tokens_per_minute=sum(br.tokens_per_minute for br in burn_rates) / count,
            cost_per_hour=sum(br.cost_per_hour for br in burn_rates) / count,
        )

    def calculate_peak_burn_rate(
        self, blocks: Sequence[SessionBlock]
    ) -> Optional[BurnRate]:
        """Burn rate of the block with the highest tokens per minute."""
        burn_rates = self._block_burn_rates(blocks)
        if not burn_rates:
            return None
        return max(burn_rates, key=lambda br: br.tokens_per_minute)

    def _block_burn_rates(self, blocks: Sequence[SessionBlock]) -> List[BurnRate]:
        rates = (self.calculate_burn_rate(block) for block in blocks)
        return [rate for rate in rates if rate is not None]

    def calculate_time_to_limit(
        self, current_tokens: int, token_limit: int, current_burn_rate: float
    ) -> Optional[timedelta]:
        """Time until ``token_limit`` is reached at ``current_burn_rate`` tokens/minute.

        Returns:
            Whole minutes as a timedelta, or None when the limit is already
            reached or the rate is not positive
        """
        if current_tokens >= token_limit or current_burn_rate <= 0.0:
            return None

        minutes_to_limit = (token_limit - current_tokens) / current_burn_rate
        return timedelta(minutes=int(minutes_to_limit))
