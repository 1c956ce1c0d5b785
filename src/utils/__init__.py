"""
Emote Tracker - Utils Package
=============================

Stateless helpers usable anywhere in the codebase.

Available Utilities:
    Snowflake: id <-> timestamp conversions
    Retry: exponential backoff for Discord API calls
    Rate Limiter: token buckets for outbound calls
    Async: background tasks that log their failures

Author: حَـــــنَّـــــا
"""

from .snowflake import id_from_timestamp, now_id, timestamp_from_id


__all__ = [
    "id_from_timestamp",
    "now_id",
    "timestamp_from_id",
]
