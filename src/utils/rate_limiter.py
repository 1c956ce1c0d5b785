"""
Emote Tracker - Rate Limiter
============================

Token buckets that pace outbound Discord calls.

DESIGN:
    A bucket holds up to `burst` tokens and refills at `rate` per second.
    Callers wait for a token instead of letting Discord answer with 429s.
    Named buckets live in one shared registry; the backfill queue builds
    its own bucket from BACKFILL_RATE.

Usage:
    await rate_limit("send_message")
    await channel.send(...)

Author: حَـــــنَّـــــا
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Dict, Optional

from src.core.logger import logger


# =============================================================================
# Bucket Configuration
# =============================================================================

@dataclass(frozen=True)
class BucketConfig:
    """Refill rate (tokens per second, 0 = unlimited) and capacity."""

    rate: float
    burst: int = 1
    name: str = ""


BUCKETS: Dict[str, BucketConfig] = {
    # Log channel mirroring
    "send_message": BucketConfig(rate=2.0, burst=5, name="Send Message"),
}

DEFAULT_BUCKET = BucketConfig(rate=1.0, burst=1)


# =============================================================================
# Token Bucket
# =============================================================================

class TokenBucket:
    """Async token bucket; waiters are served one at a time."""

    def __init__(self, config: BucketConfig) -> None:
        self.config = config
        self._tokens = float(config.burst)
        self._updated = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self._tokens = min(
            float(self.config.burst),
            self._tokens + (now - self._updated) * self.config.rate,
        )
        self._updated = now

    async def acquire(self, tokens: int = 1) -> float:
        """
        Take tokens, sleeping until they are available.

        Returns:
            Seconds spent waiting.
        """
        if self.config.rate <= 0:
            return 0.0

        async with self._lock:
            self._refill()
            deficit = tokens - self._tokens
            if deficit <= 0:
                self._tokens -= tokens
                return 0.0

            wait = deficit / self.config.rate
            await asyncio.sleep(wait)
            self._refill()
            self._tokens = max(0.0, self._tokens - tokens)
            return wait


# =============================================================================
# Named Buckets
# =============================================================================

class RateLimiter:
    """Registry of named buckets, created on first use."""

    _instance: Optional["RateLimiter"] = None

    def __new__(cls) -> "RateLimiter":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._buckets = {}
        return cls._instance

    def bucket(self, name: str) -> TokenBucket:
        if name not in self._buckets:
            config = BUCKETS.get(name) or BucketConfig(DEFAULT_BUCKET.rate, DEFAULT_BUCKET.burst, name)
            self._buckets[name] = TokenBucket(config)
        return self._buckets[name]

    async def acquire(self, name: str = "send_message", tokens: int = 1) -> float:
        waited = await self.bucket(name).acquire(tokens)
        if waited > 0.1:
            logger.debug(f"Rate limit wait: {name} ({waited:.2f}s)")
        return waited


def get_rate_limiter() -> RateLimiter:
    """Get the global rate limiter instance."""
    return RateLimiter()


async def rate_limit(bucket: str = "send_message", tokens: int = 1) -> float:
    """Wait on a named bucket before an outbound call."""
    return await get_rate_limiter().acquire(bucket, tokens)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "BucketConfig",
    "BUCKETS",
    "TokenBucket",
    "RateLimiter",
    "get_rate_limiter",
    "rate_limit",
]
