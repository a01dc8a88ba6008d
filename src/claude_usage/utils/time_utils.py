"""Time utilities: timestamp parsing, timezone conversion and duration formatting."""

import logging
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple, cast

import pytz
from pytz import BaseTzInfo

logger = logging.getLogger(__name__)

RFC3339_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(\.\d+)?(Z|z|[+-]\d{2}:\d{2})?$"
)


class TimezoneHandler:
    """Handles timezone conversions and timestamp parsing."""

    def __init__(self, default_tz: str = "UTC") -> None:
        """Initialize with a default timezone."""
        self.default_tz: BaseTzInfo = self._validate_and_get_tz(default_tz)

    def _validate_and_get_tz(self, tz_name: str) -> BaseTzInfo:
        """Validate and return pytz timezone object."""
        try:
            return pytz.timezone(tz_name)
        except pytz.exceptions.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone '{tz_name}', using UTC")
            return pytz.UTC

    def parse_timestamp(self, timestamp_str: str) -> Optional[datetime]:
        """Parse an RFC 3339 timestamp into an aware UTC datetime.

        Timestamps without an offset are read in the default timezone.
        Returns None for anything that does not parse.
        """
        if not timestamp_str or not isinstance(timestamp_str, str):
            return None

        match = RFC3339_PATTERN.match(timestamp_str.strip())
        if not match:
            return None

        date_part, time_part, fraction, tz_str = match.groups()
        # fromisoformat needs exactly six fractional digits before 3.11
        if fraction:
            fraction = "." + fraction[1:7].ljust(6, "0")
        else:
            fraction = ""

        try:
            dt = datetime.fromisoformat(f"{date_part}T{time_part}{fraction}")
            if tz_str in ("Z", "z"):
                dt = dt.replace(tzinfo=pytz.UTC)
            elif tz_str:
                dt = datetime.fromisoformat(
                    f"{date_part}T{time_part}{fraction}{tz_str}"
                )
            else:
                dt = cast(datetime, self.default_tz.localize(dt))
        except ValueError as e:
            logger.debug(f"Failed to parse timestamp {timestamp_str!r}: {e}")
            return None

        return dt.astimezone(pytz.UTC)

    def to_display(self, dt: datetime) -> datetime:
        """Convert a datetime to the default timezone for display."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=pytz.UTC)
        return dt.astimezone(self.default_tz)

    def format_datetime(self, dt: datetime, fmt: str = "%Y-%m-%d %H:%M %Z") -> str:
        """Format datetime in the default timezone."""
        return self.to_display(dt).strftime(fmt)


def floor_to_hour(timestamp: datetime) -> datetime:
    """Truncate a timestamp to the start of its hour in UTC.

    Naive timestamps are taken to be UTC already.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=pytz.UTC)
    else:
        timestamp = timestamp.astimezone(pytz.UTC)
    return timestamp.replace(minute=0, second=0, microsecond=0)


def split_duration(duration: timedelta) -> Tuple[int, int, int]:
    """Split a non-negative duration into whole (days, hours, minutes)."""
    total_minutes = max(0, int(duration.total_seconds())) // 60
    hours, minutes = divmod(total_minutes, 60)
    days, hours = divmod(hours, 24)
    return days, hours, minutes


def format_clock(seconds: float) -> str:
    """Format a number of seconds as 'H:MM' (e.g., '4:05')."""
    total_seconds = max(0, int(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    return f"{hours}:{minutes:02d}"
