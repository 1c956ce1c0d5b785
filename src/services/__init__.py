"""
Emote Tracker - Services Package
================================

Services that turn gateway traffic and channel history into stored
emote usage.

Available Services:
    IngestService: live message path, also used for backfill pages
    Reconciler: re-ingests messages edited within the consideration window
    BackfillScheduler: per-channel history pagination and its work queue
    ChannelLogger: mirrors info logs into a Discord channel
    EmoteIndex: custom emote -> owning guild lookup

Author: حَـــــنَّـــــا
"""

# =============================================================================
# Service Imports
# =============================================================================

from .backfill import BackfillScheduler, DiscordMessageSource
from .channel_logger import ChannelLogger
from .emotes import EmoteIndex
from .ingest import IngestService
from .reconciler import Reconciler


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "BackfillScheduler",
    "ChannelLogger",
    "DiscordMessageSource",
    "EmoteIndex",
    "IngestService",
    "Reconciler",
]
