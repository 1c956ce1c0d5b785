"""
Emote Tracker - Emote Ownership Index
=====================================

Explicit map from custom emote id to the joined guild that owns it.

DESIGN:
    Built from the guild roster on ready and maintained incrementally
    from guild join/remove and emoji update events, so attribution is a
    dict lookup instead of a scan over every guild's emoji list.

Author: حَـــــنَّـــــا
"""

from typing import Dict, Iterable, Optional, Set

from src.core.logger import logger


class EmoteIndex:
    """
    Read-mostly index of custom emote ownership.

    Emote ids are stored as strings, matching the usage table.
    """

    def __init__(self) -> None:
        self._owners: Dict[str, int] = {}
        self._by_guild: Dict[int, Set[str]] = {}

    # =========================================================================
    # Maintenance
    # =========================================================================

    def rebuild(self, guilds: Iterable) -> None:
        """Replace the index with the emojis of the given guilds."""
        self._owners.clear()
        self._by_guild.clear()
        count = 0
        for guild in guilds:
            self.add_guild(guild)
            count += 1

        logger.tree("Emote Index Built", [
            ("Guilds", str(count)),
            ("Emotes", str(len(self._owners))),
        ], emoji="🗂️")

    def add_guild(self, guild) -> None:
        """Index every emoji of a guild."""
        self.update_guild(guild, getattr(guild, "emojis", ()) or ())

    def remove_guild(self, guild_id: int) -> None:
        """Forget every emoji owned by a guild."""
        for emote_id in self._by_guild.pop(guild_id, set()):
            if self._owners.get(emote_id) == guild_id:
                del self._owners[emote_id]

    def update_guild(self, guild, emojis: Iterable) -> None:
        """Replace a guild's indexed emojis with its current list."""
        self.remove_guild(guild.id)
        owned = {str(emoji.id) for emoji in emojis}
        self._by_guild[guild.id] = owned
        for emote_id in owned:
            self._owners[emote_id] = guild.id

    # =========================================================================
    # Lookup
    # =========================================================================

    def owner_of(self, emote_id) -> Optional[int]:
        """Guild owning the emote, or None when no joined guild has it."""
        return self._owners.get(str(emote_id))


__all__ = ["EmoteIndex"]
