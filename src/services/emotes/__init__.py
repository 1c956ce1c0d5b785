"""
Emote Tracker - Emotes Package
==============================

Emote extraction and ownership lookup.

Author: حَـــــنَّـــــا
"""

from .index import EmoteIndex
from .parser import EmoteToken, custom_emotes, extract_emotes

__all__ = [
    "EmoteIndex",
    "EmoteToken",
    "custom_emotes",
    "extract_emotes",
]
