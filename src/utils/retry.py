"""
Emote Tracker - Retry Utilities
===============================

Exponential backoff for Discord REST calls.

DESIGN:
    Only failures a second attempt can fix are retried. Forbidden and
    NotFound subclass HTTPException but are raised on the first attempt,
    so callers can turn them into PermissionDenied or a None result.

Author: حَـــــنَّـــــا
"""

import asyncio
from typing import Any, Awaitable, Callable, Tuple, Type

import discord

from src.core.constants import LOG_TRUNCATE_LENGTH
from src.core.logger import logger

RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    discord.HTTPException,
    asyncio.TimeoutError,
    ConnectionError,
)

FATAL_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    discord.Forbidden,
    discord.NotFound,
)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number attempt + 1: base, 2x base, 4x base... capped."""
    return min(base_delay * (2 ** attempt), max_delay)


async def retry_async(
    coro_func: Callable[..., Awaitable[Any]],
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    exceptions: Tuple[Type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
    fatal: Tuple[Type[BaseException], ...] = FATAL_EXCEPTIONS,
    **kwargs,
) -> Any:
    """
    Await coro_func(*args, **kwargs), retrying transient failures.

    Args:
        max_retries: Retries after the first attempt; 0 means one attempt.
        exceptions: Failures worth retrying.
        fatal: Raised at once even when they also match `exceptions`.

    Raises:
        The failure of the last attempt.
    """
    attempt = 0
    while True:
        try:
            return await coro_func(*args, **kwargs)
        except fatal:
            raise
        except exceptions as e:
            if attempt >= max_retries:
                logger.warning("Retries Exhausted", [
                    ("Call", getattr(coro_func, "__name__", "?")),
                    ("Attempts", str(attempt + 1)),
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
                ])
                raise

            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.debug(f"Retry {attempt + 1}/{max_retries} in {delay:.1f}s", [
                ("Call", getattr(coro_func, "__name__", "?")),
                ("Error Type", type(e).__name__),
            ])
            attempt += 1
            await asyncio.sleep(delay)


__all__ = [
    "backoff_delay",
    "retry_async",
    "RETRYABLE_EXCEPTIONS",
    "FATAL_EXCEPTIONS",
]
