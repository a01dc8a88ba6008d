"""Shared pytest fixtures for Claude Usage tests."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List

import pytest

from claude_usage.core.models import UsageEntry

SONNET = "claude-3-5-sonnet-20241022"
OPUS = "claude-3-opus-20240229"
HAIKU = "claude-3-haiku-20240307"


@pytest.fixture
def base_time() -> datetime:
    """A fixed UTC reference time at the start of an hour."""
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_entry(base_time) -> Callable[..., UsageEntry]:
    """
    Factory for UsageEntry objects placed ``minutes`` after ``base_time``.
    """

    def _make(
        minutes: float = 0,
        model: str = SONNET,
        input_tokens: int = 100,
        output_tokens: int = 50,
        cache_creation_tokens: int = 0,
        cache_read_tokens: int = 0,
        cost_usd: float = 0.001,
    ) -> UsageEntry:
        return UsageEntry(
            timestamp=base_time + timedelta(minutes=minutes),
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cache_creation_tokens=cache_creation_tokens,
            cache_read_tokens=cache_read_tokens,
            cost_usd=cost_usd,
        )

    return _make


@pytest.fixture
def sample_entries(make_entry) -> List[UsageEntry]:
    """Entries spanning two session blocks separated by a six hour gap."""
    return [
        make_entry(0, input_tokens=100, output_tokens=50, cost_usd=0.001),
        make_entry(30, input_tokens=200, output_tokens=100, cost_usd=0.002),
        make_entry(60, model=OPUS, input_tokens=300, output_tokens=150, cost_usd=0.01),
        make_entry(420, model=HAIKU, input_tokens=400, output_tokens=200, cost_usd=0.003),
    ]


@pytest.fixture
def transcript_record() -> Dict:
    """A Claude Code transcript line with usage nested under ``message``."""
    return {
        "timestamp": "2024-01-01T12:00:00Z",
        "type": "assistant",
        "message": {
            "id": "msg_123",
            "model": SONNET,
            "usage": {
                "input_tokens": 100,
                "output_tokens": 50,
                "cache_creation_input_tokens": 10,
                "cache_read_input_tokens": 5,
            },
        },
        "requestId": "req_456",
    }


@pytest.fixture
def simple_record() -> Dict:
    """A flat usage record with top-level ``usage`` and ``model``."""
    return {
        "timestamp": "2024-01-01T12:00:00Z",
        "model": "claude-3-sonnet-20240229",
        "usage": {
            "input_tokens": 100,
            "output_tokens": 50,
            "cache_creation_input_tokens": 0,
            "cache_read_input_tokens": 0,
        },
        "cost_usd": 0.001,
    }


@pytest.fixture
def write_jsonl() -> Callable[[Path, List], Path]:
    """
    Write records to a JSONL file; dicts are JSON-encoded, strings written verbatim.
    """

    def _write(path: Path, records: List) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            for record in records:
                line = record if isinstance(record, str) else json.dumps(record)
                f.write(line + "\n")
        return path

    return _write
