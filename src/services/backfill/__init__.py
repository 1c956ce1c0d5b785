"""
Emote Tracker - Backfill Package
================================

History backfill: pagination states, work queue, message source and
the scheduler tying them together.

Author: حَـــــنَّـــــا
"""

from .queue import BackfillQueue
from .service import BackfillScheduler
from .source import DiscordMessageSource
from .state import (
    BottomPaging,
    ChannelState,
    Exhausted,
    QueueEntry,
    TopPaging,
    cursor_changes,
    progress_from_state,
    state_from_progress,
)

__all__ = [
    "BackfillQueue",
    "BackfillScheduler",
    "DiscordMessageSource",
    "BottomPaging",
    "ChannelState",
    "Exhausted",
    "QueueEntry",
    "TopPaging",
    "cursor_changes",
    "progress_from_state",
    "state_from_progress",
]
