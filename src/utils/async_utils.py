"""
Emote Tracker - Async Utilities
===============================

Background tasks and concurrent shutdown steps whose failures always
reach the log.

Usage:
    from src.utils.async_utils import create_safe_task

    create_safe_task(self._send(text), "Channel Log")

Author: حَـــــنَّـــــا
"""

import asyncio
from typing import Any, Coroutine, List, Optional, Set, Tuple

from src.core.constants import LOG_TRUNCATE_LENGTH
from src.core.logger import logger

# The event loop only keeps weak references to tasks
_background_tasks: Set[asyncio.Task] = set()


# =============================================================================
# Safe Background Tasks
# =============================================================================

def _report_failure(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("Background Task Failed", [
            ("Task", task.get_name()),
            ("Error Type", type(error).__name__),
            ("Error", str(error)[:LOG_TRUNCATE_LENGTH]),
        ])


def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Schedule a coroutine that nobody awaits.

    The task is kept referenced until it finishes; an exception it raises
    is logged, cancellation is not.
    """
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_report_failure)
    return task


# =============================================================================
# Concurrent Operations
# =============================================================================

async def gather_with_logging(
    *operations: Tuple[str, Coroutine[Any, Any, Any]],
    context: Optional[str] = None,
) -> List[Any]:
    """
    Run named coroutines concurrently; failures are logged and returned.

    Returns:
        One result per operation, exceptions included as values.
    """
    results = await asyncio.gather(*(coro for _, coro in operations), return_exceptions=True)

    for (name, _), result in zip(operations, results):
        if not isinstance(result, Exception):
            continue
        details = [
            ("Operation", name),
            ("Error Type", type(result).__name__),
            ("Error", str(result)[:LOG_TRUNCATE_LENGTH]),
        ]
        if context:
            details.insert(0, ("Context", context))
        logger.warning("Async Operation Failed", details)

    return results


__all__ = [
    "create_safe_task",
    "gather_with_logging",
]
