"""
Emote Tracker - Channel Cursor Mixin
====================================

Per-channel backfill cursor storage.

Author: حَـــــنَّـــــا
"""

import time
from typing import TYPE_CHECKING, Iterable, List, Optional

from src.core.database.models import CURSOR_FIELDS, ChannelProgress

if TYPE_CHECKING:
    from .manager import DatabaseManager


class ChannelsMixin:
    """Mixin for channel cursor operations."""

    def update_channel(self: "DatabaseManager", channel_id: int, **fields: Optional[int]) -> None:
        """
        Upsert a subset of a channel's cursors.

        Columns that are not passed keep their stored value; passing None
        clears a cursor.

        Args:
            channel_id: Channel snowflake.
            **fields: Any of latest_parsed_id, earliest_parsed_id,
                latest_unparsed_id.

        Raises:
            ValueError: If an unknown cursor name is passed.
        """
        unknown = set(fields) - set(CURSOR_FIELDS)
        if unknown:
            raise ValueError(f"Unknown cursor fields: {', '.join(sorted(unknown))}")

        now = time.time()
        if not fields:
            self.execute(
                "INSERT OR IGNORE INTO channels (channel_id, updated_at) VALUES (?, ?)",
                (channel_id, now)
            )
            return

        names = [name for name in CURSOR_FIELDS if name in fields]
        values = tuple(fields[name] for name in names)
        assignments = ", ".join(f"{name} = excluded.{name}" for name in names)
        self.execute(
            f"""INSERT INTO channels (channel_id, {', '.join(names)}, updated_at)
                VALUES (?, {', '.join('?' for _ in names)}, ?)
                ON CONFLICT(channel_id) DO UPDATE SET {assignments}, updated_at = excluded.updated_at""",
            (channel_id, *values, now)
        )

    def advance_latest_parsed(self: "DatabaseManager", channel_id: int, message_id: int) -> bool:
        """
        Move a channel's top watermark forward to message_id.

        Never moves the watermark backward and never creates a row.

        Returns:
            True if the stored watermark changed.
        """
        cursor = self.execute(
            """UPDATE channels SET latest_parsed_id = ?, updated_at = ?
               WHERE channel_id = ? AND (latest_parsed_id IS NULL OR latest_parsed_id < ?)""",
            (message_id, time.time(), channel_id, message_id)
        )
        return cursor.rowcount > 0

    def fetch_channels(self: "DatabaseManager", channel_ids: Iterable[int]) -> List[ChannelProgress]:
        """
        Get stored progress for the given channels.

        Channels without a row are omitted. Order follows channel_ids.
        """
        ids = list(dict.fromkeys(channel_ids))
        if not ids:
            return []

        found = {}
        # SQLite caps bound parameters per statement
        for start in range(0, len(ids), 500):
            chunk = ids[start:start + 500]
            rows = self.fetchall(
                f"""SELECT channel_id, latest_parsed_id, earliest_parsed_id, latest_unparsed_id
                    FROM channels WHERE channel_id IN ({', '.join('?' for _ in chunk)})""",
                tuple(chunk)
            )
            for row in rows:
                found[row["channel_id"]] = ChannelProgress(
                    channel_id=row["channel_id"],
                    latest_parsed_id=row["latest_parsed_id"],
                    earliest_parsed_id=row["earliest_parsed_id"],
                    latest_unparsed_id=row["latest_unparsed_id"],
                )

        return [found[channel_id] for channel_id in ids if channel_id in found]

    def get_channel_progress(self: "DatabaseManager", channel_id: int) -> Optional[ChannelProgress]:
        """Get stored progress for one channel."""
        rows = self.fetch_channels([channel_id])
        return rows[0] if rows else None


__all__ = ["ChannelsMixin"]
