"""
Emote Tracker - Database Tests
==============================

Tests for the database layer to ensure data integrity.
"""

import sqlite3

import pytest

from src.core.database import ChannelProgress
from src.core.errors import TransientStoreError


class TestChannelCursors:
    """Tests for channel cursor operations."""

    def test_update_creates_row(self, test_db):
        test_db.update_channel(1, latest_unparsed_id=500)
        assert test_db.get_channel_progress(1) == ChannelProgress(1, None, None, 500)

    def test_partial_update_keeps_other_cursors(self, test_db):
        test_db.update_channel(1, latest_unparsed_id=500)
        test_db.update_channel(1, latest_parsed_id=900, earliest_parsed_id=100)
        test_db.update_channel(1, latest_unparsed_id=None)

        progress = test_db.get_channel_progress(1)
        assert progress.latest_parsed_id == 900
        assert progress.earliest_parsed_id == 100
        assert progress.latest_unparsed_id is None

    def test_update_without_fields_only_registers(self, test_db):
        test_db.update_channel(1, latest_parsed_id=7)
        test_db.update_channel(1)
        test_db.update_channel(2)

        assert test_db.get_channel_progress(1).latest_parsed_id == 7
        assert test_db.get_channel_progress(2) == ChannelProgress(2)

    def test_unknown_field_rejected(self, test_db):
        with pytest.raises(ValueError):
            test_db.update_channel(1, newest_id=5)

    def test_fetch_channels_order_and_missing(self, test_db):
        test_db.update_channel(3, latest_unparsed_id=30)
        test_db.update_channel(1, latest_unparsed_id=10)

        rows = test_db.fetch_channels([1, 2, 3, 1])
        assert [r.channel_id for r in rows] == [1, 3]
        assert test_db.fetch_channels([]) == []

    def test_fetch_channels_many_ids(self, test_db):
        for channel_id in range(1, 1201):
            test_db.update_channel(channel_id, latest_unparsed_id=channel_id)

        rows = test_db.fetch_channels(range(1, 1201))
        assert len(rows) == 1200
        assert rows[-1].latest_unparsed_id == 1200

    def test_snowflake_sized_ids(self, test_db):
        big = 1234567890123456789
        test_db.update_channel(big, latest_parsed_id=big - 1)
        assert test_db.get_channel_progress(big).latest_parsed_id == big - 1


class TestAdvanceLatestParsed:
    """Tests for the monotonic top watermark."""

    def test_moves_forward(self, test_db):
        test_db.update_channel(1, latest_parsed_id=100)
        assert test_db.advance_latest_parsed(1, 150) is True
        assert test_db.get_channel_progress(1).latest_parsed_id == 150

    def test_never_moves_backward(self, test_db):
        test_db.update_channel(1, latest_parsed_id=100)
        assert test_db.advance_latest_parsed(1, 50) is False
        assert test_db.get_channel_progress(1).latest_parsed_id == 100

    def test_never_creates_row(self, test_db):
        assert test_db.advance_latest_parsed(1, 50) is False
        assert test_db.get_channel_progress(1) is None


class TestEmoteUsage:
    """Tests for usage facts."""

    def test_insert_and_get(self, test_db):
        assert test_db.insert_usage(1, 2, 1000, "e1") is True
        rows = test_db.get_usage(1, 2, 1000)
        assert rows == [{"guild_id": 1, "user_id": 2, "sent_at": 1000, "emote_id": "e1", "occurrence": 0}]

    def test_duplicate_insert_ignored(self, test_db):
        test_db.insert_usage(1, 2, 1000, "e1")
        assert test_db.insert_usage(1, 2, 1000, "e1") is False
        assert test_db.count_usage() == 1

    def test_insert_usages_numbers_repeats(self, test_db):
        assert test_db.insert_usages(1, 2, 1000, ["a", "b", "a"]) == 3
        rows = test_db.get_usage(1, 2, 1000)
        assert [(r["emote_id"], r["occurrence"]) for r in rows] == [("a", 0), ("b", 0), ("a", 1)]

    def test_insert_usages_redelivery_is_idempotent(self, test_db):
        test_db.insert_usages(1, 2, 1000, ["a", "b", "a"])
        assert test_db.insert_usages(1, 2, 1000, ["a", "b", "a"]) == 0
        assert test_db.count_usage() == 3

    def test_insert_usages_empty(self, test_db):
        assert test_db.insert_usages(1, 2, 1000, []) == 0

    def test_delete_usage_by_key(self, test_db):
        test_db.insert_usages(1, 2, 1000, ["a", "b"])
        test_db.insert_usages(1, 2, 2000, ["a"])

        assert test_db.delete_usage(1, 2, 1000) == 2
        assert test_db.get_usage(1, 2, 1000) == []
        assert test_db.count_usage() == 1

    def test_replace_usage(self, test_db):
        test_db.insert_usages(1, 2, 1000, ["a", "b"])

        assert test_db.replace_usage(1, 2, 1000, ["b", "c"]) == (2, 2)
        assert [r["emote_id"] for r in test_db.get_usage(1, 2, 1000)] == ["b", "c"]

    def test_count_filters(self, test_db):
        test_db.insert_usages(1, 2, 1000, ["a", "b", "a"])
        test_db.insert_usages(9, 2, 1000, ["a"])

        assert test_db.count_usage(guild_id=1) == 3
        assert test_db.count_usage(emote_id="a") == 3
        assert test_db.count_usage(guild_id=1, emote_id="a") == 2


class TestEmoteMetadata:
    """Tests for custom emote metadata."""

    def test_record_and_get(self, test_db):
        test_db.record_emote("111", "pog", True, 1000)
        emote = test_db.get_emote("111")
        assert emote["name"] == "pog"
        assert emote["is_animated"] is True
        assert emote["guild_id"] == 1000

    def test_unknown_owner_keeps_previous(self, test_db):
        test_db.record_emote("111", "pog", False, 1000)
        test_db.record_emote("111", "pogger", False, None)

        emote = test_db.get_emote("111")
        assert emote["name"] == "pogger"
        assert emote["guild_id"] == 1000

    def test_unresolved_owner_stored(self, test_db):
        test_db.record_emote("222", "lost", False, None)
        assert test_db.get_emote("222")["guild_id"] is None

    def test_missing_emote(self, test_db):
        assert test_db.get_emote("nope") is None


class TestTransientErrors:
    """Operational failures surface as TransientStoreError."""

    def test_execute_wraps_operational_error(self, test_db):
        with pytest.raises(TransientStoreError):
            test_db.execute("SELECT * FROM missing_table")

    def test_transaction_rolls_back(self, test_db):
        test_db.insert_usages(1, 2, 1000, ["a"])

        with pytest.raises(TransientStoreError):
            with test_db.transaction() as tx:
                tx.execute("DELETE FROM emote_usage")
                tx.execute("INSERT INTO missing_table VALUES (1)")

        assert test_db.count_usage() == 1

    def test_integrity_error_is_not_transient(self, test_db):
        test_db.insert_usage(1, 2, 1000, "a")
        with pytest.raises(sqlite3.IntegrityError):
            test_db.execute(
                "INSERT INTO emote_usage (guild_id, user_id, sent_at, emote_id, occurrence) VALUES (1, 2, 1000, 'a', 0)"
            )
