"""
Emote Tracker - Database Module
===============================

SQLite storage for channel cursors, emote usage and emote metadata.

Author: حَـــــنَّـــــا
"""

from src.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)
from src.core.database.models import (
    CURSOR_FIELDS,
    ChannelProgress,
    EmoteRecord,
    EmoteUsageRecord,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "CURSOR_FIELDS",
    "ChannelProgress",
    "EmoteRecord",
    "EmoteUsageRecord",
]
