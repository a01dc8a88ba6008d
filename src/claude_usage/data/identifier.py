"""Session identification for Claude Usage.

Groups usage entries into the rolling 5-hour windows that Claude plans
count usage against.
"""

import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from claude_usage.core.models import SessionBlock, UsageEntry
from claude_usage.utils.time_utils import floor_to_hour

logger = logging.getLogger(__name__)

DEFAULT_SESSION_DURATION = timedelta(hours=5)


class SessionIdentifier:
    """Creates session blocks from usage entries."""

    def __init__(self, session_duration: timedelta = DEFAULT_SESSION_DURATION):
        """
        Initialize the identifier with the length of one session window.
        """
        self.session_duration = session_duration

    def identify_blocks(self, entries: Iterable[UsageEntry]) -> List[SessionBlock]:
        """
        Group usage entries into session blocks.

        Entries are processed in timestamp order (ties keep their input order),
        so the grouping does not depend on how the input was ordered. A new
        block is opened for the first entry, for any entry at or past the end
        of the current block, and for any entry arriving a full session
        duration or more after the previous one.

        Parameters:
            entries (Iterable[UsageEntry]): Usage entries to group.

        Returns:
            List[SessionBlock]: Blocks in chronological order, none of them empty.
        """
        ordered = sorted(entries, key=lambda entry: entry.timestamp)
        if not ordered:
            return []

        blocks: List[SessionBlock] = []
        current_block: Optional[SessionBlock] = None

        for entry in ordered:
            if current_block is None or self._should_create_new_block(
                current_block, entry
            ):
                if current_block is not None:
                    blocks.append(current_block)
                current_block = self._create_block_for_entry(entry)

            current_block.add_entry(entry)

        if current_block is not None:
            blocks.append(current_block)

        logger.debug(f"Identified {len(blocks)} blocks from {len(ordered)} entries")
        return blocks

    def _should_create_new_block(self, block: SessionBlock, entry: UsageEntry) -> bool:
        """
        Check whether the entry falls outside the block's window or follows an
        inactivity gap of at least one session duration.
        """
        if entry.timestamp >= block.end_time:
            return True

        return (
            not block.is_empty
            and entry.timestamp - block.last_timestamp >= self.session_duration
        )

    def _create_block_for_entry(self, entry: UsageEntry) -> SessionBlock:
        """Open a block starting at the full hour of the entry's timestamp."""
        start_time = floor_to_hour(entry.timestamp)
        return SessionBlock(
            start_time=start_time, end_time=start_time + self.session_duration
        )
