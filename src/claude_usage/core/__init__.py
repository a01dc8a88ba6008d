"""Core package for Claude Usage.

Data models, pricing, burn rate calculations and settings.
"""

from typing import List

__all__: List[str] = []
