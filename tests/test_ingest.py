"""
Emote Tracker - Ingest Tests
============================

Tests for the live message path.
"""

from src.utils.snowflake import id_from_timestamp, timestamp_from_id
from tests.conftest import FakeMessage, FakeUser

POG = "<:pog:111111111111111111>"
LOST = "<a:lost:333333333333333333>"


def _id(offset: int = 0) -> int:
    return id_from_timestamp(1650000000000 + offset)


class TestIngestMessage:
    """Tests for IngestService.ingest_message."""

    def test_stores_every_token(self, ingest, test_db, make_channel):
        channel = make_channel()
        message = channel.add_message(_id(), f"{POG} hi 😀 {POG}", FakeUser(7))

        assert ingest.ingest_message(message) == 3

        rows = test_db.get_usage(channel.guild.id, 7, timestamp_from_id(message.id))
        assert [r["emote_id"] for r in rows] == ["111111111111111111", "😀", "111111111111111111"]

    def test_sent_at_comes_from_id(self, ingest, test_db, make_channel):
        channel = make_channel()
        message = channel.add_message(_id(5000), POG, FakeUser(7))
        ingest.ingest_message(message)

        assert test_db.get_usage(channel.guild.id, 7, 1650000005000)

    def test_redelivery_is_idempotent(self, ingest, test_db, make_channel):
        channel = make_channel()
        message = channel.add_message(_id(), f"{POG} {POG}", FakeUser(7))

        ingest.ingest_message(message)
        assert ingest.ingest_message(message) == 0
        assert test_db.count_usage() == 2

    def test_records_custom_metadata(self, ingest, test_db, make_channel):
        channel = make_channel()
        ingest.ingest_message(channel.add_message(_id(), f"{POG} {LOST}", FakeUser(7)))

        pog = test_db.get_emote("111111111111111111")
        assert pog["name"] == "pog"
        assert pog["guild_id"] == channel.guild.id

        lost = test_db.get_emote("333333333333333333")
        assert lost["is_animated"] is True
        assert lost["guild_id"] is None

    def test_unicode_emoji_have_no_metadata(self, ingest, test_db, make_channel):
        channel = make_channel()
        ingest.ingest_message(channel.add_message(_id(), "😀", FakeUser(7)))
        assert test_db.get_emote("😀") is None

    def test_ignores_messages_without_guild(self, ingest, test_db):
        message = FakeMessage(_id(), POG, channel=None, author=FakeUser(7))
        assert ingest.ingest_message(message) == 0
        assert test_db.count_usage() == 0

    def test_ignores_messages_without_author(self, ingest, test_db, make_channel):
        channel = make_channel()
        message = FakeMessage(_id(), POG, channel=channel, author=None)
        assert ingest.ingest_message(message) == 0

    def test_no_emotes(self, ingest, test_db, make_channel):
        channel = make_channel()
        assert ingest.ingest_message(channel.add_message(_id(), "plain text")) == 0


class TestWatermark:
    """Live messages advance latest_parsed_id only for backfilled channels."""

    def test_backfilled_channel_advances(self, ingest, test_db, make_channel):
        channel = make_channel()
        test_db.update_channel(channel.id, latest_parsed_id=_id(0))
        ingest.is_backfilled = lambda channel_id: channel_id == channel.id

        message = channel.add_message(_id(1000), "hi")
        ingest.ingest_message(message)

        assert test_db.get_channel_progress(channel.id).latest_parsed_id == message.id

    def test_channel_still_in_top_phase_untouched(self, ingest, test_db, make_channel):
        channel = make_channel()
        test_db.update_channel(channel.id, latest_unparsed_id=_id(0))

        ingest.ingest_message(channel.add_message(_id(1000), "hi"))
        assert test_db.get_channel_progress(channel.id).latest_parsed_id is None

    def test_backfill_pages_never_advance(self, ingest, test_db, make_channel):
        channel = make_channel()
        test_db.update_channel(channel.id, latest_parsed_id=_id(0))
        ingest.is_backfilled = lambda channel_id: True

        ingest.ingest_message(channel.add_message(_id(1000), "hi"), live=False)
        assert test_db.get_channel_progress(channel.id).latest_parsed_id == _id(0)

    def test_older_live_message_does_not_rewind(self, ingest, test_db, make_channel):
        channel = make_channel()
        test_db.update_channel(channel.id, latest_parsed_id=_id(5000))
        ingest.is_backfilled = lambda channel_id: True

        ingest.ingest_message(channel.add_message(_id(1000), "late"))
        assert test_db.get_channel_progress(channel.id).latest_parsed_id == _id(5000)


class TestReplaceMessage:
    """Tests for IngestService.replace_message."""

    def test_replaces_previous_rows(self, ingest, test_db, make_channel):
        channel = make_channel()
        message = channel.add_message(_id(), f"{POG} 😀", FakeUser(7))
        ingest.ingest_message(message)

        message.content = "😀 🔥"
        assert ingest.replace_message(message) is True

        rows = test_db.get_usage(channel.guild.id, 7, timestamp_from_id(message.id))
        assert [r["emote_id"] for r in rows] == ["😀", "🔥"]

    def test_without_guild(self, ingest):
        message = FakeMessage(_id(), POG, channel=None, author=FakeUser(7))
        assert ingest.replace_message(message) is False
