"""
Emote Tracker - Channel Logger
==============================

Mirrors info-level log records into a Discord channel.

DESIGN:
    Registered as an "info" listener on the global logger once the
    configured LOG_CHANNEL_ID resolves. Sends run in background tasks
    through the shared "send_message" bucket so logging never waits on
    Discord.

Author: حَـــــنَّـــــا
"""

from typing import Optional

import discord

from src.core.constants import CHANNEL_LOG_MAX_LENGTH, LOG_TRUNCATE_LENGTH
from src.core.logger import TreeLogger, logger
from src.utils.async_utils import create_safe_task
from src.utils.rate_limiter import rate_limit


class ChannelLogger:
    """Posts log records to one channel as code blocks."""

    def __init__(self, channel) -> None:
        self.channel = channel

    @staticmethod
    def format(text: str) -> str:
        if len(text) > CHANNEL_LOG_MAX_LENGTH:
            text = text[:CHANNEL_LOG_MAX_LENGTH - 3] + "..."
        return f"```\n{text}\n```"

    def log_to_channel(self, text: str) -> None:
        """Listener callback; schedules the send and returns immediately."""
        if not text or not text.strip():
            return
        create_safe_task(self._send(text), "Channel Log")

    async def _send(self, text: str) -> None:
        await rate_limit("send_message")
        try:
            await self.channel.send(self.format(text))
        except discord.HTTPException as e:
            # Stay off the info level so a broken channel can't feed itself
            logger.warning("Channel Log Failed", [
                ("Channel", str(getattr(self.channel, "id", "?"))),
                ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
            ])

    def attach(self, tree_logger: TreeLogger = logger) -> None:
        tree_logger.register_listener("info", self.log_to_channel)


def setup_channel_logger(bot, channel_id: Optional[int]) -> Optional[ChannelLogger]:
    """
    Attach a ChannelLogger for channel_id if the bot can see that channel.

    Returns:
        The attached logger, or None when unset or unresolvable.
    """
    if not channel_id:
        return None

    channel = bot.get_channel(channel_id)
    if channel is None:
        logger.warning("Log Channel Not Found", [("Channel ID", str(channel_id))])
        return None

    channel_logger = ChannelLogger(channel)
    channel_logger.attach()
    logger.debug("Mirroring info logs to channel", [("Channel ID", str(channel_id))])
    return channel_logger


__all__ = ["ChannelLogger", "setup_channel_logger"]
