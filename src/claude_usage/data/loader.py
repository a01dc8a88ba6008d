"""Usage data loader for Claude Usage.

Reads Claude Code JSONL transcripts (and the flat record format written by
``UsageEntry.to_dict``) into ``UsageEntry`` objects.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from claude_usage.core.models import UsageEntry
from claude_usage.core.pricing import PricingProvider
from claude_usage.error_handling import report_file_error
from claude_usage.utils.time_utils import TimezoneHandler

FIELD_COST_USD = "cost_usd"
FIELD_MESSAGE = "message"
FIELD_MODEL = "model"
FIELD_TIMESTAMP = "timestamp"
FIELD_USAGE = "usage"
TOKEN_INPUT = "input_tokens"
TOKEN_OUTPUT = "output_tokens"
TOKEN_CACHE_CREATION = "cache_creation_input_tokens"
TOKEN_CACHE_READ = "cache_read_input_tokens"

UNKNOWN_MODEL = "unknown"
JSONL_SUFFIX = ".jsonl"

PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """A usage file or directory could not be opened or read."""


class EntryParseError(ValueError):
    """A line does not hold a usable usage record."""


class DataLoader:
    """Loads usage entries from JSONL files and directory trees."""

    def __init__(
        self,
        pricing_provider: Optional[PricingProvider] = None,
        timezone_handler: Optional[TimezoneHandler] = None,
    ):
        self.pricing_provider = pricing_provider or PricingProvider()
        self.timezone_handler = timezone_handler or TimezoneHandler()

    def load_from_file(self, path: PathLike) -> List[UsageEntry]:
        """
        Load every usage entry from a single JSONL file.

        Blank lines and lines without usage data are skipped.

        Parameters:
            path: Path to the JSONL file.

        Returns:
            List[UsageEntry]: Entries in file order.

        Raises:
            DataLoadError: If the file cannot be opened or read.
        """
        file_path = Path(path)
        entries: List[UsageEntry] = []
        lines_read = 0
        lines_skipped = 0

        try:
            with open(file_path, encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    lines_read += 1
                    try:
                        entries.append(self.parse_line(line))
                    except EntryParseError as e:
                        lines_skipped += 1
                        logger.debug(f"Skipping line in {file_path.name}: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise DataLoadError(f"Failed to read file {file_path}: {e}") from e

        logger.debug(
            f"File {file_path.name}: {lines_read} lines read, "
            f"{lines_skipped} skipped, {len(entries)} entries"
        )
        return entries

    def load_from_directory(self, path: PathLike) -> List[UsageEntry]:
        """
        Recursively load all ``*.jsonl`` files below a directory.

        Files and subdirectories that fail to load are logged and skipped.

        Parameters:
            path: Root directory to scan.

        Returns:
            List[UsageEntry]: All entries sorted by timestamp.

        Raises:
            DataLoadError: If the root directory itself cannot be read.
        """
        dir_path = Path(path)
        entries: List[UsageEntry] = []
        self._load_directory_recursive(dir_path, entries)
        entries.sort(key=lambda e: e.timestamp)

        logger.info(f"Loaded {len(entries)} entries from {dir_path}")
        return entries

    def _load_directory_recursive(
        self, dir_path: Path, entries: List[UsageEntry]
    ) -> None:
        try:
            children = sorted(dir_path.iterdir())
        except OSError as e:
            raise DataLoadError(f"Failed to read directory {dir_path}: {e}") from e

        for child in children:
            if child.is_file():
                if child.suffix != JSONL_SUFFIX:
                    continue
                try:
                    entries.extend(self.load_from_file(child))
                except DataLoadError as e:
                    logger.warning("Failed to load file %s: %s", child, e)
                    report_file_error(
                        exception=e,
                        file_path=str(child),
                        operation="read",
                        additional_context={"file_exists": child.exists()},
                    )
            elif child.is_dir():
                try:
                    self._load_directory_recursive(child, entries)
                except DataLoadError as e:
                    logger.warning("Failed to load from directory %s: %s", child, e)

    def parse_line(self, line: str) -> UsageEntry:
        """
        Parse one JSONL line into a UsageEntry.

        Two record shapes are understood: Claude Code transcripts, which
        nest usage under ``message``, and flat records with top-level
        ``usage`` and ``model``.

        Raises:
            EntryParseError: If the line is not JSON or carries no usage data.
        """
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise EntryParseError(f"Failed to parse JSON: {e}") from e

        if not isinstance(data, dict):
            raise EntryParseError("Record is not a JSON object")

        message = data.get(FIELD_MESSAGE)
        if isinstance(message, dict) and FIELD_USAGE in message:
            return self._parse_transcript_record(data, message)

        if FIELD_USAGE in data:
            return self._parse_simple_record(data)

        raise EntryParseError("No usage data found in this entry")

    def _parse_transcript_record(
        self, data: Dict[str, Any], message: Dict[str, Any]
    ) -> UsageEntry:
        timestamp = self._extract_timestamp(data)
        usage = _as_object(message[FIELD_USAGE])
        model = message.get(FIELD_MODEL)
        if not isinstance(model, str):
            model = UNKNOWN_MODEL

        input_tokens = _extract_count(usage, TOKEN_INPUT)
        output_tokens = _extract_count(usage, TOKEN_OUTPUT)
        cache_creation = _extract_count(usage, TOKEN_CACHE_CREATION, default=0)
        cache_read = _extract_count(usage, TOKEN_CACHE_READ, default=0)

        cost_usd = _extract_cost(data)
        if cost_usd is None:
            computed = self.pricing_provider.calculate_cost(
                model, input_tokens, output_tokens, cache_creation, cache_read
            )
            cost_usd = computed if computed is not None else 0.0

        return UsageEntry(
            timestamp=timestamp,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cache_creation_tokens=cache_creation,
            cache_read_tokens=cache_read,
            cost_usd=cost_usd,
        )

    def _parse_simple_record(self, data: Dict[str, Any]) -> UsageEntry:
        timestamp = self._extract_timestamp(data)
        model = data.get(FIELD_MODEL)
        if not isinstance(model, str):
            raise EntryParseError(f"Missing or invalid '{FIELD_MODEL}' field")

        usage = _as_object(data[FIELD_USAGE])
        cost_usd = _extract_cost(data)

        return UsageEntry(
            timestamp=timestamp,
            model=model,
            input_tokens=_extract_count(usage, TOKEN_INPUT),
            output_tokens=_extract_count(usage, TOKEN_OUTPUT),
            cache_creation_tokens=_extract_count(usage, TOKEN_CACHE_CREATION, 0),
            cache_read_tokens=_extract_count(usage, TOKEN_CACHE_READ, 0),
            cost_usd=cost_usd if cost_usd is not None else 0.0,
        )

    def _extract_timestamp(self, data: Dict[str, Any]) -> datetime:
        value = data.get(FIELD_TIMESTAMP)
        if not isinstance(value, str):
            raise EntryParseError(f"Missing or invalid '{FIELD_TIMESTAMP}' field")

        timestamp = self.timezone_handler.parse_timestamp(value)
        if timestamp is None:
            raise EntryParseError(f"Failed to parse timestamp {value!r}")
        return timestamp


def _as_object(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise EntryParseError(f"Missing or invalid '{FIELD_USAGE}' field")
    return value


def _extract_count(
    usage: Dict[str, Any], key: str, default: Optional[int] = None
) -> int:
    """Read a non-negative integer token count, falling back to ``default``."""
    value = usage.get(key)
    # bool is an int subclass but never a valid count
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if default is not None:
        return default
    raise EntryParseError(f"Missing or invalid '{key}' field")


def _extract_cost(data: Dict[str, Any]) -> Optional[float]:
    value = data.get(FIELD_COST_USD)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None
