"""
Emote Tracker - Main Bot Class
==============================

Discord client that records custom emote and emoji usage.

Features:
- Live ingest of every guild message
- Edit reconciliation within the consideration window
- History backfill of every readable text channel
- Info log mirroring to a Discord channel
- Health check HTTP endpoint

Author: حَـــــنَّـــــا
"""

import sys
import traceback
from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands

from src.core.config import get_config, validate_and_log_config
from src.core.constants import LOG_TRUNCATE_LENGTH
from src.core.database import get_db
from src.core.health import HealthCheckServer
from src.core.logger import logger
from src.services.backfill import BackfillScheduler, DiscordMessageSource
from src.services.channel_logger import ChannelLogger, setup_channel_logger
from src.services.emotes import EmoteIndex
from src.services.ingest import IngestService
from src.services.reconciler import Reconciler
from src.utils.async_utils import gather_with_logging


# =============================================================================
# EmoteBot Class
# =============================================================================

class EmoteBot(commands.Bot):
    """
    Emote usage tracker.

    DESIGN: Central owner of every service:
    - emote_index: custom emote -> owning guild
    - ingest: live message path, shared by backfill pages
    - reconciler: edit handling
    - scheduler: history backfill queue and state machine

    SERVICE INITIALIZATION ORDER:
    1. __init__: config, database, services
    2. setup_hook: event cogs, backfill drain loop, health server
    3. on ready: emote index, log channel, backfill seeding
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        self.config = get_config()

        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        intents.message_content = True
        intents.members = True
        intents.emojis_and_stickers = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.db = get_db()
        self.start_time: datetime = datetime.now()

        self.emote_index = EmoteIndex()
        self.source = DiscordMessageSource(self)
        self.ingest = IngestService(self.db, self.emote_index)
        self.scheduler = BackfillScheduler(self.db, self.source, self.ingest, self.config)
        self.ingest.is_backfilled = self.scheduler.is_backfilled
        self.reconciler = Reconciler(self.source, self.ingest, self.config.consideration_period)

        self.health_server: Optional[HealthCheckServer] = None
        self.channel_logger: Optional[ChannelLogger] = None

        # Ready fires again after every reconnect
        self._ready_initialized: bool = False
        self._shutting_down: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load event cogs and start background services before on_ready."""
        validate_and_log_config()

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        from src.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except Exception as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        self.scheduler.start()

        self.health_server = HealthCheckServer(self, self.config.health_check_port)
        await self.health_server.start()

    # =========================================================================
    # Ready
    # =========================================================================

    async def on_tracker_ready(self) -> None:
        """Index emotes and queue every readable channel."""
        if not self.user:
            return

        self.emote_index.rebuild(self.guilds)

        if not self._ready_initialized:
            self._ready_initialized = True
            self.channel_logger = setup_channel_logger(self, self.config.log_channel_id)

            logger.tree("EMOTE TRACKER ONLINE", [
                ("Name", self.user.name),
                ("ID", str(self.user.id)),
                ("Guilds", str(len(self.guilds))),
                ("Backfill", "Enabled" if self.scheduler.enabled else "Disabled"),
                ("Log Channel", "Attached" if self.channel_logger else "None"),
            ], emoji="🚀")
        else:
            logger.info("Bot Reconnected")

        await self.scheduler.initialize_guilds(self.guilds)

    # =========================================================================
    # Event Errors
    # =========================================================================

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        """Route listener failures to the log files and error webhook."""
        error = sys.exc_info()[1]
        if error is None:
            logger.error("Event Handler Failed", [("Event", str(event_method))])
            return

        frames = traceback.extract_tb(error.__traceback__)
        location = f"{frames[-1].filename}:{frames[-1].lineno}" if frames else "unknown"
        logger.error("Event Handler Failed", [
            ("Event", str(event_method)),
            ("Error Type", type(error).__name__),
            ("Error", str(error)[:LOG_TRUNCATE_LENGTH]),
            ("Location", location),
        ])

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Graceful shutdown with proper cleanup."""
        if self._shutting_down:
            return
        self._shutting_down = True
        logger.info("Initiating Graceful Shutdown")

        operations = [("Backfill Queue", self.scheduler.stop())]
        if self.health_server:
            operations.append(("Health Server", self.health_server.stop()))
        results = await gather_with_logging(*operations, context="Shutdown")

        logger.clear_listeners()
        await super().close()
        self.db.close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
            ("Unfinished Channels", str(results[0]) if isinstance(results[0], int) else "Unknown"),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["EmoteBot"]
