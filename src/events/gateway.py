"""
Emote Tracker - Gateway Events
==============================

Every gateway event the tracker reacts to, routed through one table.

DESIGN:
    EVENT_DISPATCH maps each event name to exactly one handler on
    GatewayEvents. The cog registers the whole table on load and removes
    it on unload, so this table is the bot's complete event surface.

Author: حَـــــنَّـــــا
"""

from typing import TYPE_CHECKING, Dict

import discord
from discord.ext import commands

from src.core.constants import LOG_TRUNCATE_LENGTH
from src.core.errors import EmoteTrackerError
from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import EmoteBot


# =============================================================================
# Dispatch Table
# =============================================================================

EVENT_DISPATCH: Dict[str, str] = {
    "on_ready": "handle_ready",
    "on_message": "handle_message",
    "on_raw_message_edit": "handle_message_edit",
    "on_guild_channel_create": "handle_channel_create",
    "on_guild_channel_update": "handle_channel_update",
    "on_member_update": "handle_member_update",
    "on_guild_role_update": "handle_role_update",
    "on_guild_join": "handle_guild_join",
    "on_guild_remove": "handle_guild_remove",
    "on_guild_emojis_update": "handle_emojis_update",
}
"""Gateway event name -> GatewayEvents method name."""


class GatewayEvents(commands.Cog):
    """Routes gateway events to ingest, reconciliation and backfill."""

    def __init__(self, bot: "EmoteBot") -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        for event, handler in EVENT_DISPATCH.items():
            self.bot.add_listener(getattr(self, handler), event)

    async def cog_unload(self) -> None:
        for event, handler in EVENT_DISPATCH.items():
            self.bot.remove_listener(getattr(self, handler), event)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def handle_ready(self) -> None:
        """Rebuild the emote index and queue every readable channel."""
        await self.bot.on_tracker_ready()

    async def handle_guild_join(self, guild: discord.Guild) -> None:
        self.bot.emote_index.add_guild(guild)
        await self.bot.scheduler.initialize_guilds([guild])

    async def handle_guild_remove(self, guild: discord.Guild) -> None:
        self.bot.emote_index.remove_guild(guild.id)

    async def handle_emojis_update(self, guild: discord.Guild, before, after) -> None:
        self.bot.emote_index.update_guild(guild, after)

    # =========================================================================
    # Messages
    # =========================================================================

    async def handle_message(self, message: discord.Message) -> None:
        try:
            self.bot.ingest.ingest_message(message)
        except EmoteTrackerError as e:
            logger.error("Message Ingest Failed", [
                ("Message", str(message.id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
            ])

    async def handle_message_edit(self, payload: discord.RawMessageUpdateEvent) -> None:
        """Reconcile edits, including edits of uncached messages."""
        channel = self.bot.get_channel(payload.channel_id)
        try:
            await self.bot.reconciler.reconcile(channel, payload.message_id)
        except EmoteTrackerError as e:
            logger.error("Edit Reconciliation Failed", [
                ("Message", str(payload.message_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
            ])

    # =========================================================================
    # Channel Visibility
    # =========================================================================

    async def handle_channel_create(self, channel) -> None:
        await self.bot.scheduler.on_channel_create(channel)

    async def handle_channel_update(self, before, after) -> None:
        await self.bot.scheduler.on_channel_update(before, after)

    async def handle_member_update(self, before: discord.Member, after: discord.Member) -> None:
        """The bot's own roles changed, so any channel may have become readable."""
        if self.bot.user is None or after.id != self.bot.user.id:
            return
        if {r.id for r in before.roles} == {r.id for r in after.roles}:
            return
        await self.bot.scheduler.initialize_guilds([after.guild])

    async def handle_role_update(self, before: discord.Role, after: discord.Role) -> None:
        """A role the bot holds changed its permissions."""
        if before.permissions == after.permissions:
            return
        me = after.guild.me
        if me is None or all(r.id != after.id for r in me.roles):
            return
        await self.bot.scheduler.initialize_guilds([after.guild])


async def setup(bot: "EmoteBot") -> None:
    """Add the gateway events cog to the bot."""
    await bot.add_cog(GatewayEvents(bot))
    logger.debug("Gateway Events Loaded")


__all__ = ["EVENT_DISPATCH", "GatewayEvents"]
