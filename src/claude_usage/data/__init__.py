"""Loading usage records and grouping them into session blocks."""

from typing import List

__all__: List[str] = []
