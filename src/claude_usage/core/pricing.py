"""Pricing calculations for Claude models.

This module provides the PricingProvider class, which holds the built-in
per-model price table, calculates costs for token usage and exposes the
relative model weights used when converting raw tokens into plan usage.
"""

from typing import Dict, List, Optional, Tuple

from claude_usage.core.models import ModelPricing

TOKENS_PER_MILLION = 1_000_000

# USD per million tokens: input, output, cache creation, cache read
OPUS_RATES = (15.0, 75.0, 18.75, 1.875)
SONNET_RATES = (3.0, 15.0, 3.75, 0.3)
HAIKU_3_RATES = (0.25, 1.25, 0.3, 0.03)
HAIKU_3_5_RATES = (1.0, 5.0, 1.25, 0.1)

OPUS_MODELS = ("claude-3-opus-20240229", "claude-opus-4-20250514")
SONNET_MODELS = (
    "claude-3-sonnet-20240229",
    "claude-3-5-sonnet-20240620",
    "claude-3-5-sonnet-20241022",
    "claude-sonnet-4-20250514",
)
HAIKU_MODELS = ("claude-3-haiku-20240307", "claude-3-5-haiku-20241022")

OPUS_WEIGHT = 5.0
SONNET_WEIGHT = 1.0
HAIKU_WEIGHT = 0.2
DEFAULT_WEIGHT = 1.0


def _per_token(rates: Tuple[float, float, float, float]) -> ModelPricing:
    """Build a ModelPricing from per-million rates."""
    return ModelPricing(*(rate / TOKENS_PER_MILLION for rate in rates))


class PricingProvider:
    """Looks up model prices and calculates costs with caching support.

    Only exact model identifiers are priced; unknown models have no price
    and ``calculate_cost`` returns None for them. Weights fall back to 1.0.
    """

    def __init__(self, custom_pricing: Optional[Dict[str, ModelPricing]] = None):
        """
        Initialize the provider with the built-in price table, or with a custom one.
        """
        if custom_pricing is not None:
            self.pricing: Dict[str, ModelPricing] = dict(custom_pricing)
        else:
            self.pricing = self._default_pricing()
        self._cost_cache: Dict[Tuple[str, int, int, int, int], float] = {}

    @staticmethod
    def _default_pricing() -> Dict[str, ModelPricing]:
        pricing = {model: _per_token(OPUS_RATES) for model in OPUS_MODELS}
        pricing.update({model: _per_token(SONNET_RATES) for model in SONNET_MODELS})
        pricing["claude-3-haiku-20240307"] = _per_token(HAIKU_3_RATES)
        pricing["claude-3-5-haiku-20241022"] = _per_token(HAIKU_3_5_RATES)
        return pricing

    def get_pricing(self, model: str) -> Optional[ModelPricing]:
        return self.pricing.get(model)

    def calculate_cost(
        self,
        model: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        cache_creation_tokens: int = 0,
        cache_read_tokens: int = 0,
    ) -> Optional[float]:
        """
        Calculate the USD cost of token usage for a model.

        Parameters:
            model (str): Exact model identifier.
            input_tokens (int): Number of input tokens.
            output_tokens (int): Number of output tokens.
            cache_creation_tokens (int): Number of cache creation tokens.
            cache_read_tokens (int): Number of cache read tokens.

        Returns:
            Optional[float]: Cost rounded to six decimal places, or None if the model has no price.
        """
        pricing = self.pricing.get(model)
        if pricing is None:
            return None

        cache_key = (
            model,
            input_tokens,
            output_tokens,
            cache_creation_tokens,
            cache_read_tokens,
        )
        if cache_key in self._cost_cache:
            return self._cost_cache[cache_key]

        cost = pricing.calculate_cost(
            input_tokens, output_tokens, cache_creation_tokens, cache_read_tokens
        )
        self._cost_cache[cache_key] = cost
        return cost

    def get_model_weight(self, model: str) -> float:
        """
        Return how much one token of the model counts against a plan allowance.

        Opus counts five times and Haiku a fifth of a Sonnet token. Unknown
        models count like Sonnet.
        """
        if model in OPUS_MODELS:
            return OPUS_WEIGHT
        if model in SONNET_MODELS:
            return SONNET_WEIGHT
        if model in HAIKU_MODELS:
            return HAIKU_WEIGHT
        return DEFAULT_WEIGHT

    def supported_models(self) -> List[str]:
        return sorted(self.pricing)
