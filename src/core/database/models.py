"""
Emote Tracker - Database Type Definitions
=========================================

Record types returned from the database.

Author: حَـــــنَّـــــا
"""

from dataclasses import dataclass
from typing import Dict, Optional, TypedDict


CURSOR_FIELDS = ("latest_parsed_id", "earliest_parsed_id", "latest_unparsed_id")
"""Cursor columns of the channels table, in storage order."""


@dataclass(frozen=True)
class ChannelProgress:
    """
    Stored backfill cursors of one channel.

    Attributes:
        channel_id: Channel snowflake.
        latest_parsed_id: Everything up to this id in the live stream is captured.
        earliest_parsed_id: Everything from this id down to the oldest message is captured.
        latest_unparsed_id: Lower edge of the top-down pass still in progress.
    """

    channel_id: int
    latest_parsed_id: Optional[int] = None
    earliest_parsed_id: Optional[int] = None
    latest_unparsed_id: Optional[int] = None

    def cursors(self) -> Dict[str, Optional[int]]:
        return {name: getattr(self, name) for name in CURSOR_FIELDS}


class EmoteUsageRecord(TypedDict, total=False):
    """Type for emote usage rows."""
    guild_id: int
    user_id: int
    sent_at: int
    emote_id: str
    occurrence: int


class EmoteRecord(TypedDict, total=False):
    """Type for custom emote metadata rows."""
    emote_id: str
    name: str
    is_animated: bool
    guild_id: Optional[int]
    updated_at: float


__all__ = [
    "CURSOR_FIELDS",
    "ChannelProgress",
    "EmoteUsageRecord",
    "EmoteRecord",
]
