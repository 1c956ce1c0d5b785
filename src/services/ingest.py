"""
Emote Tracker - Message Ingest
==============================

Turns one chat message into stored emote usage.

DESIGN:
    The same path serves the live stream and backfill pages:
    - Usage rows are keyed by (guild, author, sent_at) where sent_at is
      derived from the message id, so every path agrees on the key
    - Re-delivery is absorbed by the store's uniqueness constraint
    - Only live messages move a channel's top watermark, and only once
      the channel has finished its top-down pass

Author: حَـــــنَّـــــا
"""

from typing import TYPE_CHECKING, Callable, List, Optional

from src.core.logger import logger
from src.services.emotes import EmoteIndex, EmoteToken, custom_emotes, extract_emotes
from src.utils.snowflake import timestamp_from_id

if TYPE_CHECKING:
    from src.core.database import DatabaseManager


class IngestService:
    """
    Live ingest path.

    Args:
        db: Usage and cursor store.
        emote_index: Custom emote ownership lookup.
        is_backfilled: Predicate telling whether a channel has entered
            the bottom-paging phase.
    """

    def __init__(
        self,
        db: "DatabaseManager",
        emote_index: EmoteIndex,
        is_backfilled: Optional[Callable[[int], bool]] = None,
    ) -> None:
        self.db = db
        self.emote_index = emote_index
        self.is_backfilled = is_backfilled or (lambda channel_id: False)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def message_key(message) -> Optional[tuple]:
        """(guild_id, author_id, sent_at) of a guild message, else None."""
        guild = getattr(message, "guild", None)
        author = getattr(message, "author", None)
        if guild is None or author is None:
            return None
        return guild.id, author.id, timestamp_from_id(message.id)

    def _record_metadata(self, tokens: List[EmoteToken]) -> None:
        for token in custom_emotes(tokens):
            self.db.record_emote(
                token.emote_id,
                token.name,
                token.is_animated,
                self.emote_index.owner_of(token.emote_id),
            )

    # =========================================================================
    # Ingest
    # =========================================================================

    def ingest_message(self, message, live: bool = True) -> int:
        """
        Store the emotes of one message.

        Args:
            message: Platform message with id, guild, author, channel, content.
            live: False for backfill pages, which must never move the
                channel's top watermark.

        Returns:
            Number of new usage rows.
        """
        key = self.message_key(message)
        if key is None:
            return 0

        guild_id, author_id, sent_at = key
        tokens = extract_emotes(message.content)
        inserted = 0
        if tokens:
            inserted = self.db.insert_usages(guild_id, author_id, sent_at, [t.emote_id for t in tokens])
            self._record_metadata(tokens)

        if live and self.is_backfilled(message.channel.id):
            self.db.advance_latest_parsed(message.channel.id, message.id)

        return inserted

    def replace_message(self, message) -> bool:
        """
        Swap the stored usage of a message for its current content.

        Returns:
            False for messages without a guild or author.
        """
        key = self.message_key(message)
        if key is None:
            return False

        guild_id, author_id, sent_at = key
        tokens = extract_emotes(message.content)
        deleted, inserted = self.db.replace_usage(guild_id, author_id, sent_at, [t.emote_id for t in tokens])
        self._record_metadata(tokens)

        logger.debug("Message Usage Replaced", [
            ("Message", str(message.id)),
            ("Removed", str(deleted)),
            ("Stored", str(inserted)),
        ])
        return True


__all__ = ["IngestService"]
