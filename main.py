#!/usr/bin/env python3
"""
Emote Tracker - Entry Point
===========================

Discord bot recording custom emote and emoji usage across guilds,
including each channel's full message history.

Usage:
    python main.py [--debug]

Author: حَـــــنَّـــــا
"""

import argparse
import asyncio
import os
import sys
import traceback

from dotenv import load_dotenv


def _crash_location(error: BaseException) -> str:
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return "unknown"
    return f"{frames[-1].filename}:{frames[-1].lineno}"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Emote usage tracker")
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="enable debug logging",
    )
    return parser.parse_args(argv)


async def main() -> None:
    """
    Main entry point.

    Handles the complete bot lifecycle:
    1. Loads and validates configuration
    2. Initializes the bot and its services
    3. Connects to Discord until interrupted

    Raises:
        SystemExit: If configuration is invalid or the bot fails to start
    """
    from src.core.config import ConfigValidationError, get_config
    from src.core.logger import logger

    logger.tree("EMOTE TRACKER STARTING", [
        ("Run ID", logger.run_id),
        ("Debug", "On" if os.getenv("DEBUG") else "Off"),
    ], emoji="😀")

    try:
        config = get_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        sys.exit(1)

    from src.bot import EmoteBot

    bot = EmoteBot()
    try:
        async with bot:
            await bot.start(config.discord_token)
    except Exception as e:
        logger.error("Bot Crashed", [
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:200]),
            ("Location", _crash_location(e)),
        ])
        sys.exit(1)


if __name__ == "__main__":
    args = parse_args()
    if args.debug:
        os.environ["DEBUG"] = "1"

    load_dotenv()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        from src.core.logger import logger
        logger.info("Bot stopped by user (Ctrl+C)")
