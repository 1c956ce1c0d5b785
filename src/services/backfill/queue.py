"""
Emote Tracker - Backfill Queue
==============================

Rate-limited FIFO of per-channel pagination steps.

DESIGN:
    One pending entry per channel, keyed by channel id:
    - enqueue() never blocks; enqueuing a channel that is already
      pending replaces its cursors (latest enqueue wins)
    - A channel never has two steps running at once; an enqueue made
      while its step runs waits until that step finishes
    - A step returns its continuation (or None when the channel is done),
      which goes back to the tail of the queue
    - A failing step is logged and dropped without touching other channels

    The drain loop is a single background task; each step runs in its own
    task so slow channels don't hold up the rest. BACKFILL_RATE bounds how
    often steps start, BACKFILL_CONCURRENCY how many run at once.

Author: حَـــــنَّـــــا
"""

import asyncio
from typing import Awaitable, Callable, Dict, Optional, Set

from src.core.constants import DRAIN_POLL_INTERVAL, DRAIN_TIMEOUT, LOG_TRUNCATE_LENGTH
from src.core.logger import logger
from src.utils.async_utils import create_safe_task
from src.utils.rate_limiter import BucketConfig, TokenBucket

from .state import QueueEntry

StepFunc = Callable[[QueueEntry], Awaitable[Optional[QueueEntry]]]


class BackfillQueue:
    """
    Work queue consumed by a dedicated drain loop.

    Attributes:
        finished: Set whenever the active-work set empties after having
            been non-empty; cleared by the next enqueue.
    """

    def __init__(
        self,
        step: StepFunc,
        rate: float = 0.0,
        concurrency: int = 0,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        self._step = step
        self._on_finished = on_finished
        self._bucket: Optional[TokenBucket] = (
            TokenBucket(BucketConfig(rate=rate, burst=1, name="Backfill")) if rate > 0 else None
        )
        self._semaphore: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(concurrency) if concurrency > 0 else None
        )

        self._pending: Dict[int, QueueEntry] = {}
        self._ready: asyncio.Queue = asyncio.Queue()
        self._queued: Set[int] = set()
        self._running: Set[int] = set()
        self._active: Set[int] = set()
        self._tasks: Set[asyncio.Task] = set()

        self._closed = False
        self._drain_task: Optional[asyncio.Task] = None
        self.finished = asyncio.Event()

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def running_count(self) -> int:
        return len(self._running)

    @property
    def active_count(self) -> int:
        return len(self._active)

    def is_active(self, channel_id: int) -> bool:
        """True while the channel has a pending or running step."""
        return channel_id in self._active

    def pending_entry(self, channel_id: int) -> Optional[QueueEntry]:
        return self._pending.get(channel_id)

    # =========================================================================
    # Enqueue
    # =========================================================================

    def enqueue(self, entry: QueueEntry, replace: bool = True) -> bool:
        """
        Add or update a channel's pending step.

        Args:
            entry: Step to run.
            replace: When False, an entry already pending for the channel
                is kept instead.

        Returns:
            False once the queue has stopped accepting work.
        """
        if self._closed:
            return False

        channel_id = entry.channel_id
        if replace or channel_id not in self._pending:
            self._pending[channel_id] = entry

        self._active.add(channel_id)
        self.finished.clear()
        self._schedule(channel_id)
        return True

    def _schedule(self, channel_id: int) -> None:
        if (
            channel_id in self._pending
            and channel_id not in self._queued
            and channel_id not in self._running
        ):
            self._queued.add(channel_id)
            self._ready.put_nowait(channel_id)

    def _retire(self, channel_id: int) -> None:
        self._active.discard(channel_id)
        if self._active or self._closed:
            return

        self.finished.set()
        if self._on_finished:
            self._on_finished()

    # =========================================================================
    # Drain Loop
    # =========================================================================

    def start(self) -> None:
        """Start the background drain loop."""
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = create_safe_task(self._drain(), "Backfill Queue")
            logger.debug("Backfill queue started")

    async def _drain(self) -> None:
        while True:
            channel_id = await self._ready.get()
            self._queued.discard(channel_id)
            entry = self._pending.pop(channel_id, None)
            if entry is None:
                continue

            # Running before any wait, so a concurrent enqueue can't start a
            # second step for the same channel
            self._running.add(channel_id)
            try:
                if self._bucket:
                    await self._bucket.acquire()
                if self._semaphore:
                    await self._semaphore.acquire()
            except asyncio.CancelledError:
                self._running.discard(channel_id)
                self._pending.setdefault(channel_id, entry)
                raise

            task = asyncio.create_task(self._execute(entry))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _execute(self, entry: QueueEntry) -> None:
        channel_id = entry.channel_id
        continuation: Optional[QueueEntry] = None
        try:
            continuation = await self._step(entry)
        except Exception as e:
            logger.error("Backfill Step Failed", [
                ("Channel", str(channel_id)),
                ("Phase", entry.phase),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
            ])
        finally:
            self._running.discard(channel_id)
            if self._semaphore:
                self._semaphore.release()

        if continuation is not None:
            self.enqueue(continuation, replace=False)

        if channel_id in self._pending:
            self._schedule(channel_id)
        else:
            self._retire(channel_id)

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def stop(self, drain_timeout: float = DRAIN_TIMEOUT) -> int:
        """
        Stop accepting work and drain what is left.

        Steps already queued still run until drain_timeout; their
        continuations are not re-queued. Whatever remains afterwards
        resumes from stored cursors on the next start.

        Returns:
            Number of channels still pending or running (0 = fully drained).
        """
        self._closed = True
        loop = asyncio.get_running_loop()
        deadline = loop.time() + drain_timeout

        draining = self._drain_task is not None and not self._drain_task.done()
        if draining and (self._pending or self._running):
            logger.info(f"Draining Backfill Queue ({len(self._pending) + len(self._running)} channels)")
            while (self._pending or self._running) and loop.time() < deadline:
                await asyncio.sleep(DRAIN_POLL_INTERVAL)

        remaining = len(self._pending) + len(self._running)

        to_cancel = [t for t in (self._drain_task, *self._tasks) if t is not None and not t.done()]
        for task in to_cancel:
            task.cancel()
        if to_cancel:
            await asyncio.gather(*to_cancel, return_exceptions=True)

        if remaining:
            logger.warning("Backfill Queue Stopped With Work Left", [
                ("Channels", str(remaining)),
                ("Reason", "Drain timeout" if draining else "Queue not running"),
            ])
        else:
            logger.debug("Backfill queue stopped")

        return remaining


__all__ = ["BackfillQueue"]
