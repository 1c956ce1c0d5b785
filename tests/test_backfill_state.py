"""
Emote Tracker - Backfill State Machine Tests
============================================
"""

from src.core.database import ChannelProgress
from src.services.backfill.state import (
    BottomPaging,
    Exhausted,
    QueueEntry,
    TopPaging,
    cursor_changes,
    progress_from_state,
    state_from_progress,
)

NOW = 10_000


class TestTopPaging:
    """Transitions out of the top phase."""

    def test_full_page_stays_on_top(self):
        state = TopPaging(5000).advance([4999, 4990, 4980], page_size=3, now_id=NOW)
        assert state == TopPaging(4980)

    def test_full_page_keeps_old_cursors(self):
        state = TopPaging(5000, 3000, 100).advance([4999, 4998], page_size=2, now_id=NOW)
        assert state == TopPaging(4998, 3000, 100)

    def test_short_page_moves_to_bottom(self):
        state = TopPaging(5000).advance([4999, 4500], page_size=100, now_id=NOW)
        assert state == BottomPaging(NOW, 4500)

    def test_empty_first_page(self):
        state = TopPaging(5000).advance([], page_size=100, now_id=NOW)
        assert state == BottomPaging(NOW, 5000)

    def test_caught_up_resumes_previous_bottom(self):
        state = TopPaging(5000, 3000, 100).advance([4999], page_size=100, now_id=NOW)
        assert state == BottomPaging(NOW, 100)


class TestBottomPaging:
    """Transitions out of the bottom phase."""

    def test_page_moves_earliest_down(self):
        assert BottomPaging(NOW, 500).advance([499, 300]) == BottomPaging(NOW, 300)

    def test_empty_page_exhausts(self):
        assert BottomPaging(NOW, 500).advance([]) == Exhausted(NOW, 500)


class TestConversions:
    """Stored cursors <-> phases."""

    def test_top_from_progress(self):
        progress = ChannelProgress(1, latest_parsed_id=30, earliest_parsed_id=10, latest_unparsed_id=50)
        assert state_from_progress(progress) == TopPaging(50, 30, 10)

    def test_bottom_from_progress(self):
        progress = ChannelProgress(1, latest_parsed_id=30, earliest_parsed_id=10)
        assert state_from_progress(progress) == BottomPaging(30, 10)

    def test_bottom_without_earliest(self):
        assert state_from_progress(ChannelProgress(1, latest_parsed_id=30)) == BottomPaging(30, 30)

    def test_empty_row(self):
        assert state_from_progress(ChannelProgress(1)) is None
        assert QueueEntry.from_progress(ChannelProgress(1)) is None

    def test_top_to_progress(self):
        assert progress_from_state(7, TopPaging(50, 30, 10)) == ChannelProgress(7, 30, 10, 50)

    def test_bottom_to_progress_clears_unparsed(self):
        assert progress_from_state(7, BottomPaging(30, 10)) == ChannelProgress(7, 30, 10, None)

    def test_exhausted_to_progress(self):
        assert progress_from_state(7, Exhausted(30, 10)) == ChannelProgress(7, 30, 10, None)


class TestCursorChanges:
    """Only changed columns are written back."""

    def test_top_step(self):
        old = ChannelProgress(1, latest_unparsed_id=50)
        new = ChannelProgress(1, latest_unparsed_id=40)
        assert cursor_changes(old, new) == {"latest_unparsed_id": 40}

    def test_top_to_bottom(self):
        old = progress_from_state(1, TopPaging(50))
        new = progress_from_state(1, BottomPaging(NOW, 40))
        assert cursor_changes(old, new) == {
            "latest_parsed_id": NOW,
            "earliest_parsed_id": 40,
            "latest_unparsed_id": None,
        }

    def test_no_changes(self):
        progress = ChannelProgress(1, 30, 10)
        assert cursor_changes(progress, progress) == {}


class TestQueueEntry:
    """Tests for QueueEntry helpers."""

    def test_round_trip_and_phase(self):
        entry = QueueEntry.from_progress(ChannelProgress(3, latest_unparsed_id=50))
        assert entry.phase == "TopPaging"
        assert entry.progress == ChannelProgress(3, latest_unparsed_id=50)

        moved = entry.advance(BottomPaging(NOW, 40))
        assert moved.channel_id == 3
        assert moved.phase == "BottomPaging"
