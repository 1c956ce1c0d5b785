"""
Emote Tracker - Source Package
==============================

Discord bot recording custom emote and emoji usage across guilds,
including a one-time walk of every readable channel's history.

Package Structure:
- bot.py: EmoteBot, owner of every service
- core/: Configuration, storage, logging, errors, health endpoint
- events/: Gateway event dispatch table
- services/: Extraction, ingest, edit reconciliation, history backfill
- utils/: Snowflake math, retries, rate limiting, background tasks

Author: حَـــــنَّـــــا
"""
