"""
Task tracker for graceful shutdown.

Background asyncio tasks (the rollover scheduler) are registered here so the
FastAPI lifespan can cancel them on exit.
"""

import asyncio
import logging
from typing import Coroutine, Optional, Set

logger = logging.getLogger(__name__)

# Registry of active tasks
_active_tasks: Set[asyncio.Task] = set()


def create_tracked_task(coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
    """
    Create an asyncio task and track it until it finishes.

    Args:
        coro: The coroutine to run as a task
        name: Optional name for the task (for debugging)

    Returns:
        The created task
    """
    task = asyncio.create_task(coro, name=name)
    _active_tasks.add(task)

    def _on_done(t: asyncio.Task) -> None:
        _active_tasks.discard(t)
        if t.cancelled():
            logger.info(f"Task cancelled: {t.get_name()}")
            return
        exc = t.exception()
        if exc is not None:
            logger.error(
                f"Task failed: {t.get_name()}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        else:
            logger.debug(f"Task completed: {t.get_name()}")

    task.add_done_callback(_on_done)
    logger.debug(f"Created tracked task: {task.get_name()}")
    return task


def get_active_task_count() -> int:
    """Get the count of active tasks."""
    return len(_active_tasks)


async def cancel_all_tasks(timeout: float = 5.0) -> int:
    """
    Cancel all tracked tasks and wait for them to finish.

    Args:
        timeout: Maximum time to wait for tasks to cancel

    Returns:
        Number of tasks that were cancelled
    """
    if not _active_tasks:
        return 0

    tasks = list(_active_tasks)
    logger.info(f"Cancelling {len(tasks)} background task(s)")
    for task in tasks:
        if not task.done():
            task.cancel()

    try:
        await asyncio.wait_for(
            asyncio.gather(*tasks, return_exceptions=True), timeout=timeout
        )
    except asyncio.TimeoutError:
        remaining = len([t for t in tasks if not t.done()])
        logger.warning(f"Timeout waiting for tasks to cancel. Remaining: {remaining}")

    return sum(1 for t in tasks if t.cancelled())
