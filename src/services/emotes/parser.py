"""
Emote Tracker - Emote Extractor
===============================

Pure, total extraction of emote tokens from message text.

DESIGN:
    One combined pattern walks the text left to right, so tokens come
    back in the order they appear. Anything that does not match a
    well-formed custom emote or a Unicode emoji is skipped rather than
    reported; extraction has no failure mode.

Author: حَـــــنَّـــــا
"""

import re
from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Patterns
# =============================================================================

# <:name:id> or <a:name:id>
CUSTOM_EMOTE_PATTERN = r"<(?P<animated>a)?:(?P<name>[A-Za-z0-9_]{2,32}):(?P<id>\d{15,21})>"

_EMOJI_BASE = (
    "["
    "\U0001F600-\U0001F64F"  # Emoticons
    "\U0001F300-\U0001F5FF"  # Misc Symbols and Pictographs
    "\U0001F680-\U0001F6FF"  # Transport and Map
    "\U0001F900-\U0001F9FF"  # Supplemental Symbols and Pictographs
    "\U0001FA70-\U0001FAFF"  # Symbols and Pictographs Extended-A
    "\U00002600-\U000026FF"  # Misc Symbols
    "\U00002702-\U000027B0"  # Dingbats
    "]"
)
_SKIN_TONE = "[\U0001F3FB-\U0001F3FF]"
_VARIATION_SELECTOR = "\uFE0F"
_ZWJ = "\u200D"

_EMOJI_UNIT = f"{_EMOJI_BASE}{_SKIN_TONE}?{_VARIATION_SELECTOR}?"

# Regional indicator pairs render as a single flag
FLAG_PATTERN = "[\U0001F1E6-\U0001F1FF]{2}"

UNICODE_EMOJI_PATTERN = f"{_EMOJI_UNIT}(?:{_ZWJ}{_EMOJI_UNIT})*"

TOKEN_PATTERN = re.compile(
    f"{CUSTOM_EMOTE_PATTERN}|(?P<flag>{FLAG_PATTERN})|(?P<emoji>{UNICODE_EMOJI_PATTERN})"
)


# =============================================================================
# Token Type
# =============================================================================

@dataclass(frozen=True)
class EmoteToken:
    """
    One emote occurrence in a message.

    For Unicode emoji, emote_id and name are both the emoji text.
    """

    emote_id: str
    name: str
    is_animated: bool = False
    is_custom: bool = False


# =============================================================================
# Extraction
# =============================================================================

def extract_emotes(content: Optional[str]) -> List[EmoteToken]:
    """
    Extract every emote token from message text, in text order.

    Args:
        content: Raw message content. None or empty yields no tokens.

    Returns:
        Tokens, including repeats.
    """
    if not content:
        return []

    tokens = []
    for match in TOKEN_PATTERN.finditer(content):
        if match.group("id"):
            tokens.append(EmoteToken(
                emote_id=match.group("id"),
                name=match.group("name"),
                is_animated=match.group("animated") is not None,
                is_custom=True,
            ))
        else:
            text = match.group("flag") or match.group("emoji")
            tokens.append(EmoteToken(emote_id=text, name=text))
    return tokens


def custom_emotes(tokens: List[EmoteToken]) -> List[EmoteToken]:
    """Distinct custom emotes of a token list, first occurrence wins."""
    seen = {}
    for token in tokens:
        if token.is_custom and token.emote_id not in seen:
            seen[token.emote_id] = token
    return list(seen.values())


__all__ = [
    "EmoteToken",
    "extract_emotes",
    "custom_emotes",
    "TOKEN_PATTERN",
]
