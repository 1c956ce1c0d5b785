"""
Emote Tracker - Events Package
==============================

Event handler cogs.

DESIGN:
    Cogs are loaded dynamically by the bot using load_extension().
    gateway.py holds the dispatch table covering every event the
    tracker listens to.

Author: حَـــــنَّـــــا
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "src.events.gateway",
]
"""
List of event cog module paths for dynamic loading.

DESIGN:
    Bot iterates this list and calls load_extension() for each.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EVENT_COGS",
]
