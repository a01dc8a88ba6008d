"""Monitoring package for Claude Usage.

The UsageMonitor facade and the background refresh orchestrator.
"""

from typing import List

__all__: List[str] = []
