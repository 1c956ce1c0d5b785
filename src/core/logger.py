"""
Emote Tracker - Logger Module
=============================

Tree-style logging with Eastern timestamps, daily log files and
pluggable listeners.

DESIGN:
    Structured, hierarchical output that's easy to scan. Related values are
    grouped under a title with tree connectors.

    Key features:
    - Tree-style formatting for structured data
    - Daily log directories with retention cleanup
    - Session run IDs to correlate restarts
    - Error trees forwarded to a Discord webhook
    - Level listeners (used to mirror info logs into a Discord channel)

Author: حَـــــنَّـــــا
"""

import asyncio
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

import aiohttp


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path("logs")
"""Directory for all log files, organized by date."""

LOG_RETENTION_DAYS = 7
"""Number of days to retain log directories before cleanup."""

NY_TZ = ZoneInfo("America/New_York")

LISTENER_LEVELS = ("info", "warning", "error")

LogListener = Callable[[str], None]


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Logger with tree-style formatting and level listeners.

    Attributes:
        run_id: Unique identifier for this process session.
        log_file: Path to the main log file.
        error_file: Path to the error-only log file.
    """

    def __init__(self, name: str = "EmoteTracker") -> None:
        self.run_id: str = str(uuid.uuid4())[:8]
        self._name = name
        self._webhook_url: Optional[str] = None
        self._listeners: Dict[str, List[LogListener]] = {level: [] for level in LISTENER_LEVELS}

        today = datetime.now(NY_TZ).strftime("%Y-%m-%d")
        self.log_dir = LOGS_DIR / today
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"{name}-{today}.log"
        self.error_file = self.log_dir / f"{name}-Errors-{today}.log"

        self._cleanup_old_logs()
        self._write_session_header()

    def set_webhook(self, url: Optional[str]) -> None:
        """Set webhook URL for error notifications."""
        self._webhook_url = url

    # =========================================================================
    # Listeners
    # =========================================================================

    def register_listener(self, level: str, callback: LogListener) -> None:
        """
        Register a callback receiving the formatted text of a level.

        Args:
            level: One of "info", "warning", "error". Tree logs count as info.
            callback: Called synchronously with the formatted record.

        Raises:
            ValueError: If the level does not accept listeners.
        """
        if level not in self._listeners:
            raise ValueError(f"Unsupported listener level: {level}")
        self._listeners[level].append(callback)

    def clear_listeners(self) -> None:
        """Remove every registered listener."""
        for callbacks in self._listeners.values():
            callbacks.clear()

    def _notify(self, level: str, text: str) -> None:
        for callback in list(self._listeners.get(level, ())):
            try:
                callback(text)
            except Exception as e:
                print(f"[LOG LISTENER] {type(e).__name__}: {e}")

    # =========================================================================
    # Log Cleanup
    # =========================================================================

    def _cleanup_old_logs(self) -> None:
        """Remove dated log directories older than the retention period."""
        if not LOGS_DIR.exists():
            return

        now = datetime.now()
        deleted = 0

        for item in LOGS_DIR.iterdir():
            if not item.is_dir():
                continue
            try:
                dir_date = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                continue
            if (now - dir_date).days > LOG_RETENTION_DAYS:
                for f in item.iterdir():
                    f.unlink()
                item.rmdir()
                deleted += 1

        if deleted > 0:
            print(f"[LOG CLEANUP] Removed {deleted} old log directories")

    def _write_session_header(self) -> None:
        header = f"""
============================================================
NEW SESSION - RUN ID: {self.run_id}
[{datetime.now(NY_TZ).strftime("%I:%M:%S %p %Z")}]
============================================================
"""
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(header)

    # =========================================================================
    # Core Logging
    # =========================================================================

    def _get_timestamp(self) -> str:
        return datetime.now(NY_TZ).strftime("[%I:%M:%S %p %Z]")

    def _write(
        self,
        message: str,
        emoji: str = "",
        include_timestamp: bool = True,
        is_error: bool = False,
    ) -> str:
        """
        Write a line to console and log file(s).

        Returns:
            The line as written, without timestamp.
        """
        line = f"{emoji} {message}" if emoji else message
        full_message = f"{self._get_timestamp()} {line}" if include_timestamp else line

        print(full_message)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{full_message}\n")

        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(f"{full_message}\n")

        return line

    @staticmethod
    def _tree_lines(items: List[Tuple[str, str]]) -> List[str]:
        lines = []
        for i, (key, value) in enumerate(items):
            prefix = "└─" if i == len(items) - 1 else "├─"
            lines.append(f"  {prefix} {key}: {value}")
        return lines

    # =========================================================================
    # Tree Formatting
    # =========================================================================

    def tree(
        self,
        title: str,
        items: List[Tuple[str, str]],
        emoji: str = "📦",
    ) -> None:
        """
        Log structured data in tree format.

        Example output:
            [02:30:45 PM EST] 🧵 Channel Backfilled
              ├─ Channel: 123
              └─ Messages: 250
        """
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

        head = self._write(title, emoji=emoji)
        lines = self._tree_lines(items)
        for line in lines:
            self._write(line, include_timestamp=False)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

        self._notify("info", "\n".join([head, *lines]))

    # =========================================================================
    # Log Levels
    # =========================================================================

    def debug(self, msg: str, details: Optional[List[Tuple[str, str]]] = None) -> None:
        """Log debug message (only if DEBUG env var set)."""
        if not os.getenv("DEBUG"):
            return
        self._write(msg, "🔍")
        for line in self._tree_lines(details or []):
            self._write(line, include_timestamp=False)

    def info(self, msg: str) -> None:
        self._notify("info", self._write(msg, "ℹ️"))

    def success(self, msg: str) -> None:
        self._notify("info", self._write(msg, "✅"))

    def warning(self, msg: str, details: Optional[List[Tuple[str, str]]] = None) -> None:
        head = self._write(msg, "⚠️")
        lines = self._tree_lines(details or [])
        for line in lines:
            self._write(line, include_timestamp=False)
        self._notify("warning", "\n".join([head, *lines]))

    def error(
        self,
        msg: str,
        details: Optional[List[Tuple[str, str]]] = None,
    ) -> None:
        """
        Log error message with optional structured details.

        DESIGN:
            Errors with details use tree format and are forwarded to the
            webhook when one is configured and a loop is running.
        """
        if not details:
            self._notify("error", self._write(msg, "❌", is_error=True))
            return

        self._write("", is_error=True)
        head = self._write(msg, "❌", is_error=True)
        lines = self._tree_lines(details)
        for line in lines:
            self._write(line, include_timestamp=False, is_error=True)
        self._write("", include_timestamp=False, is_error=True)
        self._notify("error", "\n".join([head, *lines]))

        if self._webhook_url:
            try:
                asyncio.get_running_loop().create_task(self._send_webhook_error(msg, details))
            except RuntimeError:
                pass  # No running loop (startup/shutdown)

    def critical(self, msg: str) -> None:
        self._notify("error", self._write(msg, "🚨", is_error=True))

    # =========================================================================
    # Webhook Integration
    # =========================================================================

    async def _send_webhook_error(
        self,
        title: str,
        details: List[Tuple[str, str]],
    ) -> None:
        """Send an error embed to the configured Discord webhook."""
        if not self._webhook_url:
            return

        try:
            description = "\n".join([f"**{k}:** {v}" for k, v in details])
            payload = {
                "embeds": [{
                    "title": f"❌ {title}",
                    "description": description,
                    "color": 0xDC3545,
                    "timestamp": datetime.now(NY_TZ).isoformat(),
                    "footer": {"text": f"{self._name} | Run ID: {self.run_id}"},
                }]
            }

            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status != 204:
                        print(f"Webhook error: {resp.status}")

        except Exception as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""Global logger instance shared by every module."""


__all__ = [
    "logger",
    "TreeLogger",
]
