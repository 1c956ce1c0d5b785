"""
Database Schema Module
======================

Table definitions and migrations.

Author: حَـــــنَّـــــا
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Snowflakes fit in SQLite's signed 64-bit INTEGER.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Channels Table
        # DESIGN: Three backfill cursors per channel, any may be NULL
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS channels (
                channel_id INTEGER PRIMARY KEY,
                latest_parsed_id INTEGER,
                earliest_parsed_id INTEGER,
                latest_unparsed_id INTEGER,
                updated_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Emote Usage Table
        # DESIGN: One row per emote occurrence. `occurrence` numbers equal
        # emotes within one message so re-delivery is ignored while
        # repeated emotes still count.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS emote_usage (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                sent_at INTEGER NOT NULL,
                emote_id TEXT NOT NULL,
                occurrence INTEGER NOT NULL DEFAULT 0,
                UNIQUE(guild_id, user_id, sent_at, emote_id, occurrence)
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_usage_message ON emote_usage(guild_id, user_id, sent_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_usage_emote ON emote_usage(emote_id)"
        )

        # -----------------------------------------------------------------
        # Emotes Table
        # DESIGN: Custom emote metadata, guild_id is best-effort
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS emotes (
                emote_id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                is_animated INTEGER NOT NULL DEFAULT 0,
                guild_id INTEGER,
                updated_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_emotes_guild ON emotes(guild_id)"
        )

        conn.commit()


__all__ = ["SchemaMixin"]
