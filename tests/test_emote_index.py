"""
Emote Tracker - Emote Index Tests
=================================
"""

from src.services.emotes import EmoteIndex
from tests.conftest import FakeEmoji, FakeGuild


def _guild(guild_id, *emote_ids):
    return FakeGuild(guild_id, emojis=[FakeEmoji(e) for e in emote_ids])


class TestEmoteIndex:
    """Tests for emote ownership lookup."""

    def test_rebuild(self):
        index = EmoteIndex()
        index.rebuild([_guild(1, 10, 11), _guild(2, 20)])

        assert index.owner_of(10) == 1
        assert index.owner_of("20") == 2
        assert index.owner_of(11) == 1

    def test_unknown_emote(self):
        index = EmoteIndex()
        index.rebuild([_guild(1, 10)])
        assert index.owner_of(99) is None

    def test_rebuild_replaces(self):
        index = EmoteIndex()
        index.rebuild([_guild(1, 10)])
        index.rebuild([_guild(2, 20)])

        assert index.owner_of(10) is None
        assert index.owner_of(20) == 2

    def test_remove_guild(self):
        index = EmoteIndex()
        index.add_guild(_guild(1, 10, 11))
        index.add_guild(_guild(2, 20))

        index.remove_guild(1)
        assert index.owner_of(10) is None
        assert index.owner_of(20) == 2

    def test_update_guild(self):
        index = EmoteIndex()
        guild = _guild(1, 10, 11)
        index.add_guild(guild)

        index.update_guild(guild, [FakeEmoji(11), FakeEmoji(12)])
        assert index.owner_of(10) is None
        assert index.owner_of(11) == 1
        assert index.owner_of(12) == 1

    def test_remove_unknown_guild(self):
        index = EmoteIndex()
        index.remove_guild(123)
        assert index.owner_of(123) is None
