"""
Emote Tracker - Test Fixtures
=============================

Shared fixtures for all tests.
"""

import sys
import pytest
from pathlib import Path
from typing import List, Optional
from unittest.mock import MagicMock

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Mock aiohttp
aiohttp_mock = MagicMock()
sys.modules['aiohttp'] = aiohttp_mock
sys.modules['aiohttp.web'] = aiohttp_mock.web


# =============================================================================
# Discord Mocks
# =============================================================================

class MockHTTPException(Exception):
    """Mock discord.HTTPException."""

    def __init__(self, message: str = "HTTP error", status: int = 500):
        super().__init__(message)
        self.status = status


class MockForbidden(MockHTTPException):
    """Mock discord.Forbidden."""

    def __init__(self, message: str = "Missing Access"):
        super().__init__(message, status=403)


class MockNotFound(MockHTTPException):
    """Mock discord.NotFound."""

    def __init__(self, message: str = "Unknown Message"):
        super().__init__(message, status=404)


class MockObject:
    """Mock discord.Object."""

    def __init__(self, id: int):
        self.id = id


class MockTextChannel:
    """Base class standing in for discord.TextChannel in isinstance checks."""

    pass


class MockCog:
    """Mock commands.Cog that can be subclassed."""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

    @staticmethod
    def listener(name=None):
        def decorator(func):
            return func
        return decorator


# Mock discord module before any imports
discord_mock = MagicMock()
discord_mock.HTTPException = MockHTTPException
discord_mock.Forbidden = MockForbidden
discord_mock.NotFound = MockNotFound
discord_mock.Object = MockObject
discord_mock.TextChannel = MockTextChannel

commands_mock = MagicMock()
commands_mock.Cog = MockCog
commands_mock.Bot = MagicMock

ext_mock = MagicMock()
ext_mock.commands = commands_mock
discord_mock.ext = ext_mock

sys.modules['discord'] = discord_mock
sys.modules['discord.ext'] = ext_mock
sys.modules['discord.ext.commands'] = commands_mock


# =============================================================================
# Fake Discord Objects
# =============================================================================

class FakePermissions:
    def __init__(self, readable: bool):
        self.read_messages = readable
        self.read_message_history = readable


class FakeUser:
    def __init__(self, id: int, name: str = "user"):
        self.id = id
        self.name = name


class FakeRole:
    def __init__(self, id: int, permissions: int = 0):
        self.id = id
        self.permissions = permissions
        self.guild = None


class FakeEmoji:
    def __init__(self, id: int, name: str = "emote"):
        self.id = id
        self.name = name


class FakeGuild:
    def __init__(self, id: int, name: str = "guild", emojis: Optional[list] = None):
        self.id = id
        self.name = name
        self.emojis = list(emojis or [])
        self.channels: list = []
        self.me = FakeUser(999, "tracker")
        self.me.roles = []


class FakeMessage:
    def __init__(self, id: int, content: str, channel, author: Optional[FakeUser] = None):
        self.id = id
        self.content = content
        self.channel = channel
        self.guild = getattr(channel, "guild", None)
        self.author = author


class FakeChannel(MockTextChannel):
    """
    Text channel holding an in-memory history.

    history() pages newest-first below `before`, like discord.py.
    """

    def __init__(self, id: int, guild: FakeGuild, name: str = "general", readable: bool = True):
        self.id = id
        self.guild = guild
        self.name = name
        self.readable = readable
        self.forbidden = False
        self.messages: List[FakeMessage] = []
        self.history_calls: List[Optional[int]] = []
        self.failures_left = 0
        guild.channels.append(self)

    def permissions_for(self, member) -> FakePermissions:
        return FakePermissions(self.readable)

    def add_message(self, id: int, content: str = "", author: Optional[FakeUser] = None) -> FakeMessage:
        message = FakeMessage(id, content, self, author or FakeUser(42))
        self.messages.append(message)
        return message

    async def history(self, limit: int = 100, before=None):
        before_id = before.id if before is not None else None
        self.history_calls.append(before_id)
        if self.forbidden:
            raise MockForbidden()
        if self.failures_left > 0:
            self.failures_left -= 1
            raise MockHTTPException("Service Unavailable", status=503)

        older = [m for m in self.messages if before_id is None or m.id < before_id]
        older.sort(key=lambda m: m.id, reverse=True)
        for message in older[:limit]:
            yield message

    async def fetch_message(self, message_id: int) -> FakeMessage:
        if self.forbidden:
            raise MockForbidden()
        for message in self.messages:
            if message.id == message_id:
                return message
        raise MockNotFound()


class FakeBot:
    """Just enough of commands.Bot for the message source."""

    def __init__(self):
        self.channels = {}

    def add_channel(self, channel: FakeChannel) -> FakeChannel:
        self.channels[channel.id] = channel
        return channel

    def get_channel(self, channel_id: int):
        return self.channels.get(channel_id)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_emotes.db"


@pytest.fixture
def test_db(temp_db_path, monkeypatch):
    """Create a fresh test database instance."""
    from src.core.database import manager as manager_module

    # Reset singleton
    manager_module.DatabaseManager._instance = None

    # Patch the DB path
    monkeypatch.setattr(manager_module, "DB_PATH", temp_db_path)
    monkeypatch.setattr(manager_module, "DATA_DIR", temp_db_path.parent)

    db = manager_module.DatabaseManager()

    yield db

    # Cleanup
    db.close()
    manager_module.DatabaseManager._instance = None


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def test_config():
    """Config with fast, retry-free backfill settings."""
    from src.core.config import Config
    return Config(
        discord_token="test-token",
        backfill_page_size=100,
        backfill_fetch_retries=0,
        drain_timeout=1.0,
    )


@pytest.fixture
def guild():
    return FakeGuild(1000, "Test Guild", emojis=[FakeEmoji(111111111111111111, "pog")])


@pytest.fixture
def fake_bot():
    return FakeBot()


@pytest.fixture
def make_channel(fake_bot, guild):
    """Factory creating readable channels registered on the fake bot."""
    counter = iter(range(2000, 3000))

    def _make(readable: bool = True, name: str = "general") -> FakeChannel:
        return fake_bot.add_channel(FakeChannel(next(counter), guild, name=name, readable=readable))

    return _make


@pytest.fixture
def emote_index(guild):
    from src.services.emotes import EmoteIndex
    index = EmoteIndex()
    index.add_guild(guild)
    return index


@pytest.fixture
def source(fake_bot):
    from src.services.backfill import DiscordMessageSource
    return DiscordMessageSource(fake_bot)


@pytest.fixture
def ingest(test_db, emote_index):
    from src.services.ingest import IngestService
    return IngestService(test_db, emote_index)


@pytest.fixture
def scheduler(test_db, source, ingest, test_config):
    from src.services.backfill import BackfillScheduler
    sched = BackfillScheduler(test_db, source, ingest, test_config)
    ingest.is_backfilled = sched.is_backfilled
    return sched
