"""
Emote Tracker - Backfill State Machine
======================================

Tagged per-channel pagination state and its pure transitions.

DESIGN:
    A channel is always in exactly one phase:
    - TopPaging: walking from "now" down to where it was last caught up
    - BottomPaging: walking below the oldest captured message
    - Exhausted: nothing older exists, the channel is fully indexed

    Transitions are pure; the scheduler persists only the cursor columns
    a transition actually changed (see cursor_changes), so a live message
    moving latest_parsed_id forward is never overwritten by a stale entry.

Author: حَـــــنَّـــــا
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Union

from src.core.database.models import ChannelProgress


# =============================================================================
# States
# =============================================================================

@dataclass(frozen=True)
class TopPaging:
    """
    Paging newest-first below latest_unparsed_id.

    latest_parsed_id and earliest_parsed_id carry over from an earlier
    run; messages at or below latest_parsed_id are already captured.
    """

    latest_unparsed_id: int
    latest_parsed_id: Optional[int] = None
    earliest_parsed_id: Optional[int] = None

    def advance(self, ids: Sequence[int], page_size: int, now_id: int) -> "ChannelState":
        """
        Next state after ingesting a filtered page.

        Args:
            ids: Ids of the page's messages newer than latest_parsed_id.
            page_size: Requested page size; a shorter page ends the phase.
            now_id: Snowflake for the current time, the new live watermark.
        """
        lowest = min(ids) if ids else self.latest_unparsed_id
        if len(ids) >= page_size:
            return TopPaging(lowest, self.latest_parsed_id, self.earliest_parsed_id)

        # Nothing below lowest is newer than the old watermark, so the
        # bottom phase continues under the previous bottom edge if there
        # is one, otherwise under the oldest message the top phase reached.
        earliest = self.earliest_parsed_id if self.earliest_parsed_id is not None else lowest
        return BottomPaging(now_id, earliest)


@dataclass(frozen=True)
class BottomPaging:
    """Paging newest-first below earliest_parsed_id."""

    latest_parsed_id: int
    earliest_parsed_id: int

    def advance(self, ids: Sequence[int]) -> "ChannelState":
        """Next state after ingesting a page; an empty page ends the channel."""
        if not ids:
            return Exhausted(self.latest_parsed_id, self.earliest_parsed_id)
        return BottomPaging(self.latest_parsed_id, min(ids))


@dataclass(frozen=True)
class Exhausted:
    """History fully captured; only the live stream moves the channel now."""

    latest_parsed_id: int
    earliest_parsed_id: int


ChannelState = Union[TopPaging, BottomPaging, Exhausted]


# =============================================================================
# Conversions
# =============================================================================

def state_from_progress(progress: ChannelProgress) -> Optional[ChannelState]:
    """
    Decode stored cursors into a phase.

    Returns:
        None for a row carrying no cursors at all.
    """
    if progress.latest_unparsed_id is not None:
        return TopPaging(
            progress.latest_unparsed_id,
            progress.latest_parsed_id,
            progress.earliest_parsed_id,
        )
    if progress.latest_parsed_id is not None:
        earliest = progress.earliest_parsed_id
        return BottomPaging(
            progress.latest_parsed_id,
            earliest if earliest is not None else progress.latest_parsed_id,
        )
    return None


def progress_from_state(channel_id: int, state: ChannelState) -> ChannelProgress:
    """Encode a phase as stored cursors."""
    if isinstance(state, TopPaging):
        return ChannelProgress(
            channel_id=channel_id,
            latest_parsed_id=state.latest_parsed_id,
            earliest_parsed_id=state.earliest_parsed_id,
            latest_unparsed_id=state.latest_unparsed_id,
        )
    return ChannelProgress(
        channel_id=channel_id,
        latest_parsed_id=state.latest_parsed_id,
        earliest_parsed_id=state.earliest_parsed_id,
        latest_unparsed_id=None,
    )


def cursor_changes(old: ChannelProgress, new: ChannelProgress) -> Dict[str, Optional[int]]:
    """Cursor columns whose value differs between two snapshots."""
    before = old.cursors()
    return {name: value for name, value in new.cursors().items() if before[name] != value}


# =============================================================================
# Queue Entry
# =============================================================================

@dataclass(frozen=True)
class QueueEntry:
    """A channel's pending pagination step; cursors travel with the entry."""

    channel_id: int
    state: ChannelState

    @classmethod
    def from_progress(cls, progress: ChannelProgress) -> Optional["QueueEntry"]:
        state = state_from_progress(progress)
        if state is None:
            return None
        return cls(progress.channel_id, state)

    @property
    def progress(self) -> ChannelProgress:
        return progress_from_state(self.channel_id, self.state)

    @property
    def phase(self) -> str:
        return type(self.state).__name__

    def advance(self, state: ChannelState) -> "QueueEntry":
        return QueueEntry(self.channel_id, state)


__all__ = [
    "TopPaging",
    "BottomPaging",
    "Exhausted",
    "ChannelState",
    "QueueEntry",
    "state_from_progress",
    "progress_from_state",
    "cursor_changes",
]
