"""
Emote Tracker - Snowflake Helpers
=================================

Conversions between Discord snowflakes and millisecond timestamps.

DESIGN:
    A snowflake's high bits are milliseconds since the Discord epoch, so
    a timestamp maps to the smallest id that could have been minted at
    that moment. `now_id()` is the boundary below which every message
    already existed when it was taken.

Author: حَـــــنَّـــــا
"""

import time

from src.core.constants import DISCORD_EPOCH_MS, MS_PER_SECOND, SNOWFLAKE_TIMESTAMP_SHIFT


def id_from_timestamp(timestamp_ms: int) -> int:
    """Smallest snowflake minted at the given Unix time in milliseconds."""
    return (int(timestamp_ms) - DISCORD_EPOCH_MS) << SNOWFLAKE_TIMESTAMP_SHIFT


def timestamp_from_id(snowflake: int) -> int:
    """Unix time in milliseconds at which a snowflake was minted."""
    return (int(snowflake) >> SNOWFLAKE_TIMESTAMP_SHIFT) + DISCORD_EPOCH_MS


def now_id() -> int:
    """Snowflake for the current wall-clock time."""
    return id_from_timestamp(int(time.time() * MS_PER_SECOND))


__all__ = [
    "id_from_timestamp",
    "timestamp_from_id",
    "now_id",
]
