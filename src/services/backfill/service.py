"""
Emote Tracker - Backfill Scheduler
==================================

Walks every readable channel's history exactly once.

DESIGN:
    Each channel moves TopPaging -> BottomPaging -> Exhausted:
    - TopPaging pages down from the moment the channel was seeded until
      it meets the live watermark from an earlier run (or history runs out)
    - BottomPaging pages below the oldest message captured so far
    - Exhausted means the channel is fully indexed and is not requeued

    Cursor changes are persisted after each page is ingested and before
    the continuation is queued, so a restart resumes at the last committed
    page boundary. Re-delivery of that page is absorbed by the usage
    table's uniqueness constraint.

    Channels in the backfilled set have finished their top phase; the
    live ingest path advances their top watermark.

Author: حَـــــنَّـــــا
"""

from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from src.core.config import Config
from src.core.constants import BACKFILL_RETRY_BASE_DELAY, BACKFILL_RETRY_MAX_DELAY
from src.core.database.models import ChannelProgress
from src.core.errors import PermissionDenied
from src.core.logger import logger
from src.utils.retry import retry_async
from src.utils.snowflake import now_id

from .queue import BackfillQueue
from .state import BottomPaging, Exhausted, QueueEntry, TopPaging, cursor_changes

if TYPE_CHECKING:
    from src.core.database import DatabaseManager
    from src.services.ingest import IngestService
    from .source import DiscordMessageSource


class BackfillScheduler:
    """
    Per-channel pagination state machine driven by a BackfillQueue.

    Disabled entirely when NO_BACKFILLING is set: every trigger becomes a
    no-op while live ingest and reconciliation keep running.
    """

    def __init__(
        self,
        db: "DatabaseManager",
        source: "DiscordMessageSource",
        ingest: "IngestService",
        config: Config,
    ) -> None:
        self.db = db
        self.source = source
        self.ingest = ingest
        self.enabled = not config.no_backfilling
        self.page_size = config.backfill_page_size
        self.fetch_retries = config.backfill_fetch_retries
        self.drain_timeout = config.drain_timeout

        self._backfilled: Set[int] = set()
        self.queue = BackfillQueue(
            self.step,
            rate=config.backfill_rate,
            concurrency=config.backfill_concurrency,
            on_finished=self._on_finished,
        )

    # =========================================================================
    # Backfilled Set
    # =========================================================================

    def is_backfilled(self, channel_id: int) -> bool:
        """True once the channel's top phase has caught up to the live stream."""
        return channel_id in self._backfilled

    # =========================================================================
    # Triggers
    # =========================================================================

    async def initialize_guilds(self, guilds: Iterable) -> int:
        """
        Seed and queue every readable text channel of the given guilds.

        Channels that already have work in flight are left alone.

        Returns:
            Number of channels queued.
        """
        if not self.enabled:
            return 0

        seed = now_id()
        channel_ids: List[int] = []
        guild_count = 0
        for guild in guilds:
            guild_count += 1
            for channel in getattr(guild, "channels", ()):
                if not self.source.can_read(channel) or self.queue.is_active(channel.id):
                    continue
                self.db.update_channel(channel.id, latest_unparsed_id=seed)
                self._backfilled.discard(channel.id)
                channel_ids.append(channel.id)

        queued = sum(1 for progress in self.db.fetch_channels(channel_ids) if self.queue_progress(progress))

        logger.tree("Backfill Queued", [
            ("Guilds", str(guild_count)),
            ("Channels Seeded", str(len(channel_ids))),
            ("Channels Queued", str(queued)),
        ], emoji="📥")
        return queued

    async def on_channel_create(self, channel) -> bool:
        """Queue a newly created channel from the current moment."""
        if not self.enabled or not self.source.can_read(channel):
            return False

        seed = now_id()
        self.db.update_channel(channel.id, latest_unparsed_id=seed)
        self._backfilled.discard(channel.id)
        return self.queue.enqueue(QueueEntry(channel.id, TopPaging(seed)))

    async def on_channel_update(self, before, after) -> bool:
        """
        Re-seed a channel that just became readable.

        Facts captured before access was lost are kept; the top phase
        restarts from now and stops at the stored live watermark.
        """
        if not self.enabled:
            return False
        if self.source.can_read(before) or not self.source.can_read(after):
            return False

        self.db.update_channel(after.id, latest_unparsed_id=now_id())
        self._backfilled.discard(after.id)

        progress = self.db.get_channel_progress(after.id)
        queued = progress is not None and self.queue_progress(progress)
        if queued:
            logger.tree("Channel Access Regained", [
                ("Channel", f"#{getattr(after, 'name', '?')} ({after.id})"),
            ], emoji="🔓")
        return queued

    def queue_progress(self, progress: ChannelProgress) -> bool:
        """Queue a channel from its stored cursors."""
        entry = QueueEntry.from_progress(progress)
        if entry is None:
            return False
        return self.queue.enqueue(entry)

    # =========================================================================
    # State Machine Step
    # =========================================================================

    async def _fetch_page(self, channel, before_id: int) -> List:
        return await retry_async(
            self.source.get_messages,
            channel,
            self.page_size,
            before_id,
            max_retries=self.fetch_retries,
            base_delay=BACKFILL_RETRY_BASE_DELAY,
            max_delay=BACKFILL_RETRY_MAX_DELAY,
        )

    def _ingest_page(self, messages: List) -> None:
        for message in messages:
            self.ingest.ingest_message(message, live=False)

    def _on_finished(self) -> None:
        logger.tree("Finished Backfilling", [
            ("Backfilled Channels", str(len(self._backfilled))),
        ], emoji="✅")

    def _drop(self, entry: QueueEntry, reason: str) -> None:
        """Stop backfilling a channel the bot can no longer read."""
        self._backfilled.discard(entry.channel_id)
        progress = entry.progress
        logger.tree("Backfill Stopped", [
            ("Channel", str(entry.channel_id)),
            ("Reason", reason),
            ("Phase", entry.phase),
            ("Latest Parsed", str(progress.latest_parsed_id)),
            ("Earliest Parsed", str(progress.earliest_parsed_id)),
            ("Latest Unparsed", str(progress.latest_unparsed_id)),
        ], emoji="🔒")

    async def step(self, entry: QueueEntry) -> Optional[QueueEntry]:
        """
        Run one pagination step for a channel.

        Permission is re-checked first since it may have changed since
        the entry was queued.

        Returns:
            The continuation, or None when the channel is done or unreadable.

        Raises:
            TransientStoreError: Storage failed; nothing of this step's
                cursors was written.
        """
        state = entry.state
        if isinstance(state, Exhausted):
            return None

        channel = self.source.get_channel(entry.channel_id)
        if channel is None:
            self._drop(entry, "Channel not found")
            return None
        if not self.source.can_read(channel):
            self._drop(entry, "Missing read permission")
            return None

        try:
            if isinstance(state, TopPaging):
                messages = await self._fetch_page(channel, state.latest_unparsed_id)
                if state.latest_parsed_id is not None:
                    messages = [m for m in messages if m.id > state.latest_parsed_id]
                self._ingest_page(messages)
                new_state = state.advance([m.id for m in messages], self.page_size, now_id())
            else:
                messages = await self._fetch_page(channel, state.earliest_parsed_id)
                self._ingest_page(messages)
                new_state = state.advance([m.id for m in messages])
        except PermissionDenied as e:
            self._drop(entry, e.reason or "Forbidden")
            return None

        next_entry = entry.advance(new_state)
        changes = cursor_changes(entry.progress, next_entry.progress)
        if changes:
            self.db.update_channel(entry.channel_id, **changes)

        channel_name = getattr(channel, "name", "?")
        if isinstance(state, TopPaging) and isinstance(new_state, BottomPaging):
            self._backfilled.add(entry.channel_id)
            logger.debug("Top Of Channel Caught Up", [
                ("Channel", f"#{channel_name} ({entry.channel_id})"),
                ("Latest Parsed", str(new_state.latest_parsed_id)),
            ])

        if isinstance(new_state, Exhausted):
            logger.tree("Channel Backfilled", [
                ("Channel", f"#{channel_name} ({entry.channel_id})"),
                ("Guild", getattr(getattr(channel, "guild", None), "name", "?")),
                ("Earliest Parsed", str(new_state.earliest_parsed_id)),
            ], emoji="🧵")
            return None

        return next_entry

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start draining the queue."""
        if self.enabled:
            self.queue.start()
        else:
            logger.info("Backfilling disabled (NO_BACKFILLING)")

    async def stop(self) -> int:
        """Drain and stop the queue; returns channels left unfinished."""
        return await self.queue.stop(self.drain_timeout)

    def status(self) -> dict:
        """Backfill snapshot for the health endpoint."""
        return {
            "enabled": self.enabled,
            "active": self.queue.active_count,
            "pending": self.queue.pending_count,
            "running": self.queue.running_count,
            "backfilled": len(self._backfilled),
            "finished": self.queue.finished.is_set(),
        }


__all__ = ["BackfillScheduler"]
