"""
Emote Tracker - Edit Reconciler
===============================

Keeps stored usage in line with edited messages.

DESIGN:
    Only edits within CONSIDERATION_PERIOD of the message's creation are
    reconciled. The edit event may carry a partial payload, so the full
    message is re-fetched and its usage rows are replaced in one
    transaction; any number of edits leaves exactly the emotes of the
    latest content.

Author: حَـــــنَّـــــا
"""

import time
from typing import TYPE_CHECKING, Optional

from src.core.constants import MS_PER_SECOND
from src.core.errors import PermissionDenied
from src.core.logger import logger
from src.utils.snowflake import timestamp_from_id

if TYPE_CHECKING:
    from src.services.backfill.source import DiscordMessageSource
    from src.services.ingest import IngestService


class Reconciler:
    """Re-ingests recently created messages when they are edited."""

    def __init__(
        self,
        source: "DiscordMessageSource",
        ingest: "IngestService",
        consideration_period: int,
    ) -> None:
        self.source = source
        self.ingest = ingest
        self.consideration_period = consideration_period

    def is_within_window(self, message_id: int, now_ms: Optional[int] = None) -> bool:
        """True if the message was created less than the consideration period ago."""
        if now_ms is None:
            now_ms = int(time.time() * MS_PER_SECOND)
        age_ms = now_ms - timestamp_from_id(message_id)
        return age_ms < self.consideration_period * MS_PER_SECOND

    async def reconcile(self, channel, message_id: int) -> bool:
        """
        Replace a message's stored usage with its current emotes.

        Returns:
            True if stored usage was rewritten.
        """
        if channel is None or getattr(channel, "guild", None) is None:
            return False
        if not self.is_within_window(message_id):
            return False

        try:
            message = await self.source.get_message(channel, message_id)
        except PermissionDenied:
            logger.debug("Edit Skipped", [
                ("Message", str(message_id)),
                ("Reason", "Cannot read channel"),
            ])
            return False

        if message is None:
            return False

        return self.ingest.replace_message(message)


__all__ = ["Reconciler"]
