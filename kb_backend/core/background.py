"""
Detached background tasks.

Fire-and-forget coroutines whose failures are logged, never raised to the
request that scheduled them.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

_background_tasks: set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        logger.warning(f"{__name__}:_on_done - Background task cancelled", extra={"task": task.get_name()})
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            f"{__name__}:_on_done - Background task failed",
            extra={"task": task.get_name(), "error": str(exc), "error_type": type(exc).__name__},
        )


def fire_and_forget(coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
    """
    Schedule a coroutine on the running loop without awaiting it.

    A strong reference is held until the task finishes so it is not
    garbage-collected mid-flight.

    Args:
        coro: Coroutine to run
        name: Optional task name used in logs

    Returns:
        asyncio.Task: The scheduled task
    """
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_tasks() -> set[asyncio.Task]:
    """Snapshot of tasks still running."""
    return set(_background_tasks)
