"""
Emote Tracker - Discord Message Source
======================================

Channel history access through discord.py.

Author: حَـــــنَّـــــا
"""

from typing import TYPE_CHECKING, List, Optional

import discord

from src.core.errors import PermissionDenied

if TYPE_CHECKING:
    from discord.ext import commands


class DiscordMessageSource:
    """
    Reads channels and messages for the scheduler and the reconciler.

    DESIGN:
        Only guild text channels are backfilled. A channel is readable when
        the bot can both see it and read its history; history refusals
        surface as PermissionDenied, vanished messages as None.
    """

    def __init__(self, bot: "commands.Bot") -> None:
        self.bot = bot

    def get_channel(self, channel_id: int):
        """Cached channel, or None if the bot can't see it."""
        return self.bot.get_channel(channel_id)

    def can_read(self, channel) -> bool:
        """True for guild text channels whose history the bot may read."""
        if not isinstance(channel, discord.TextChannel):
            return False
        guild = getattr(channel, "guild", None)
        me = getattr(guild, "me", None) if guild is not None else None
        if me is None:
            return False
        permissions = channel.permissions_for(me)
        return bool(permissions.read_messages and permissions.read_message_history)

    async def get_messages(self, channel, limit: int, before_id: Optional[int] = None) -> List:
        """
        One history page, newest first.

        Args:
            channel: Text channel to read.
            limit: Page size.
            before_id: Exclusive upper bound; None starts at the newest message.

        Raises:
            PermissionDenied: If Discord refuses the read.
        """
        before = discord.Object(id=before_id) if before_id is not None else None
        try:
            return [message async for message in channel.history(limit=limit, before=before)]
        except discord.Forbidden as e:
            raise PermissionDenied(channel.id, str(e)) from e

    async def get_message(self, channel, message_id: int):
        """
        Fetch the full current payload of one message.

        Returns:
            The message, or None if it was deleted.

        Raises:
            PermissionDenied: If Discord refuses the read.
        """
        try:
            return await channel.fetch_message(message_id)
        except discord.NotFound:
            return None
        except discord.Forbidden as e:
            raise PermissionDenied(channel.id, str(e)) from e


__all__ = ["DiscordMessageSource"]
