"""
Emote Tracker - Error Types
===========================

Exception taxonomy shared by the storage layer, the message source and
the backfill scheduler.

DESIGN:
    Only conditions that callers branch on get their own type:
    - TransientStoreError aborts one drain step, cursors stay untouched
    - PermissionDenied ends a channel's backfill without being an error
    A vanished message is reported as None by the message source, and
    emote extraction never raises at all.

Author: حَـــــنَّـــــا
"""

from typing import Optional


class EmoteTrackerError(Exception):
    """Base class for tracker errors."""

    pass


class TransientStoreError(EmoteTrackerError):
    """
    Storage hiccup (locked database, I/O failure).

    The step that hit it is abandoned; the next scheduling trigger
    resumes from the last committed cursor.
    """

    pass


class PermissionDenied(EmoteTrackerError):
    """The platform refused to read a channel's history."""

    def __init__(self, channel_id: int, reason: Optional[str] = None) -> None:
        self.channel_id = channel_id
        self.reason = reason
        super().__init__(f"Cannot read channel {channel_id}" + (f": {reason}" if reason else ""))


__all__ = [
    "EmoteTrackerError",
    "TransientStoreError",
    "PermissionDenied",
]
