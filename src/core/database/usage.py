"""
Emote Tracker - Emote Usage Mixin
=================================

Emote usage facts and custom emote metadata.

Author: حَـــــنَّـــــا
"""

import time
from collections import Counter
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from src.core.database.models import EmoteRecord, EmoteUsageRecord

if TYPE_CHECKING:
    from .manager import DatabaseManager


def _number_occurrences(emote_ids: Sequence[str]) -> List[Tuple[str, int]]:
    """Pair each emote id with its index among equal ids ("a", "b", "a" -> a0, b0, a1)."""
    seen: Counter = Counter()
    numbered = []
    for emote_id in emote_ids:
        numbered.append((emote_id, seen[emote_id]))
        seen[emote_id] += 1
    return numbered


class UsageMixin:
    """Mixin for emote usage and emote metadata operations."""

    # =========================================================================
    # Usage Facts
    # =========================================================================

    def insert_usage(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        sent_at: int,
        emote_id: str,
        occurrence: int = 0,
    ) -> bool:
        """
        Record one emote occurrence.

        Returns:
            False if the exact occurrence was already stored.
        """
        cursor = self.execute(
            """INSERT OR IGNORE INTO emote_usage (guild_id, user_id, sent_at, emote_id, occurrence)
               VALUES (?, ?, ?, ?, ?)""",
            (guild_id, user_id, sent_at, emote_id, occurrence)
        )
        return cursor.rowcount > 0

    def insert_usages(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        sent_at: int,
        emote_ids: Sequence[str],
    ) -> int:
        """
        Record every emote of one message, in text order.

        Re-delivering the same message inserts nothing new.

        Returns:
            Number of new rows.
        """
        if not emote_ids:
            return 0
        with self.transaction() as tx:
            inserted = 0
            for emote_id, occurrence in _number_occurrences(emote_ids):
                cursor = tx.execute(
                    """INSERT OR IGNORE INTO emote_usage (guild_id, user_id, sent_at, emote_id, occurrence)
                       VALUES (?, ?, ?, ?, ?)""",
                    (guild_id, user_id, sent_at, emote_id, occurrence)
                )
                inserted += cursor.rowcount
        return inserted

    def delete_usage(self: "DatabaseManager", guild_id: int, user_id: int, sent_at: int) -> int:
        """
        Delete every usage row of one message key.

        Returns:
            Number of deleted rows.
        """
        cursor = self.execute(
            "DELETE FROM emote_usage WHERE guild_id = ? AND user_id = ? AND sent_at = ?",
            (guild_id, user_id, sent_at)
        )
        return cursor.rowcount

    def replace_usage(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        sent_at: int,
        emote_ids: Sequence[str],
    ) -> Tuple[int, int]:
        """
        Atomically swap a message key's usage rows for a new set.

        Returns:
            (deleted, inserted) row counts.
        """
        with self.transaction() as tx:
            cursor = tx.execute(
                "DELETE FROM emote_usage WHERE guild_id = ? AND user_id = ? AND sent_at = ?",
                (guild_id, user_id, sent_at)
            )
            deleted = cursor.rowcount
            for emote_id, occurrence in _number_occurrences(emote_ids):
                tx.execute(
                    """INSERT INTO emote_usage (guild_id, user_id, sent_at, emote_id, occurrence)
                       VALUES (?, ?, ?, ?, ?)""",
                    (guild_id, user_id, sent_at, emote_id, occurrence)
                )
        return deleted, len(emote_ids)

    def get_usage(self: "DatabaseManager", guild_id: int, user_id: int, sent_at: int) -> List[EmoteUsageRecord]:
        """Get the usage rows of one message key, in insertion order."""
        rows = self.fetchall(
            """SELECT guild_id, user_id, sent_at, emote_id, occurrence FROM emote_usage
               WHERE guild_id = ? AND user_id = ? AND sent_at = ?
               ORDER BY id""",
            (guild_id, user_id, sent_at)
        )
        return [dict(row) for row in rows]

    def count_usage(self: "DatabaseManager", guild_id: Optional[int] = None, emote_id: Optional[str] = None) -> int:
        """Count usage rows, optionally filtered by guild and/or emote."""
        clauses = []
        params: list = []
        if guild_id is not None:
            clauses.append("guild_id = ?")
            params.append(guild_id)
        if emote_id is not None:
            clauses.append("emote_id = ?")
            params.append(emote_id)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        row = self.fetchone(f"SELECT COUNT(*) AS total FROM emote_usage{where}", tuple(params))
        return row["total"] if row else 0

    # =========================================================================
    # Emote Metadata
    # =========================================================================

    def record_emote(
        self: "DatabaseManager",
        emote_id: str,
        name: str,
        is_animated: bool,
        guild_id: Optional[int],
    ) -> None:
        """
        Upsert custom emote metadata.

        A known owning guild is kept when the new attribution is None,
        since the bot may have left the owner in the meantime.
        """
        self.execute(
            """INSERT INTO emotes (emote_id, name, is_animated, guild_id, updated_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(emote_id) DO UPDATE SET
                   name = excluded.name,
                   is_animated = excluded.is_animated,
                   guild_id = COALESCE(excluded.guild_id, emotes.guild_id),
                   updated_at = excluded.updated_at""",
            (str(emote_id), name, 1 if is_animated else 0, guild_id, time.time())
        )

    def get_emote(self: "DatabaseManager", emote_id: str) -> Optional[EmoteRecord]:
        """Get metadata for one custom emote."""
        row = self.fetchone(
            "SELECT emote_id, name, is_animated, guild_id, updated_at FROM emotes WHERE emote_id = ?",
            (str(emote_id),)
        )
        if not row:
            return None
        record = dict(row)
        record["is_animated"] = bool(record["is_animated"])
        return record


__all__ = ["UsageMixin"]
