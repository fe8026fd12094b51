"""
Async Hygiene Tools
Supervised task management, timeouts and a deterministic clock for tests.
"""

import asyncio
import logging
import time
from typing import Awaitable, Dict, TypeVar

logger = logging.getLogger(__name__)

# Global registry for supervised tasks
_supervised_tasks: Dict[str, asyncio.Task] = {}

T = TypeVar('T')

class AsyncTimeoutError(Exception):
    """Raised when an async operation times out."""
    pass

def create_supervised_task(coro: Awaitable[T], *, name: str) -> asyncio.Task:
    """
    Create a supervised task that will be cancelled on shutdown.

    Args:
        coro: The coroutine to run
        name: Unique name for the task (used for tracking)

    Returns:
        The created task

    Raises:
        ValueError: If a live task with the same name already exists
    """
    existing = _supervised_tasks.get(name)
    if existing is not None and not existing.done():
        raise ValueError(f"Task '{name}' already exists")

    async def _supervised_wrapper():
        try:
            return await coro
        except asyncio.CancelledError:
            logger.info(f"[async_tools] Task '{name}' cancelled")
            raise
        except Exception as e:
            logger.error(f"[async_tools] Task '{name}' failed: {e}")
            raise

    task = asyncio.create_task(_supervised_wrapper(), name=name)
    _supervised_tasks[name] = task
    task.add_done_callback(lambda t: _forget(name, t))
    return task

def _forget(name: str, task: asyncio.Task) -> None:
    if _supervised_tasks.get(name) is task:
        del _supervised_tasks[name]

async def timeout(awaitable: Awaitable[T], seconds: float) -> T:
    """
    Add a timeout to an awaitable.

    Raises:
        AsyncTimeoutError: If the operation times out
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        raise AsyncTimeoutError(f"Operation timed out after {seconds}s")

async def shutdown_supervised_tasks():
    """Cancel all supervised tasks and wait for them to complete."""
    if not _supervised_tasks:
        return

    tasks = list(_supervised_tasks.values())
    logger.info(f"[async_tools] Shutting down {len(tasks)} supervised tasks")

    for task in tasks:
        if not task.done():
            task.cancel()

    await asyncio.gather(*tasks, return_exceptions=True)

    _supervised_tasks.clear()
    logger.info("[async_tools] All supervised tasks shut down")

def get_supervised_tasks() -> Dict[str, asyncio.Task]:
    """Get the current supervised tasks registry."""
    return _supervised_tasks.copy()

class DeterministicClock:
    """A deterministic clock for testing that can be frozen and advanced."""

    def __init__(self, start_time: float = 0.0):
        self._time = start_time
        self._frozen = False

    def time(self) -> float:
        """Get current time."""
        if self._frozen:
            return self._time
        return time.time()

    def freeze(self):
        """Freeze the clock at current time."""
        self._frozen = True
        self._time = time.time()

    def advance(self, seconds: float):
        """Advance the clock by the given number of seconds."""
        if not self._frozen:
            raise RuntimeError("Clock must be frozen to advance")
        self._time += seconds

    def unfreeze(self):
        """Unfreeze the clock to use real time."""
        self._frozen = False

# Global deterministic clock for tests
_deterministic_clock = DeterministicClock()

def get_deterministic_clock() -> DeterministicClock:
    """Get the global deterministic clock."""
    return _deterministic_clock
