"""Owner for fire-and-forget coroutines.

Writes that must not block a response (lastLogin refresh, auto-provisioning)
and lookups that lost a timeout race keep running here after the request
returns. The set holds strong references so the event loop cannot collect
them early, and logs their failures instead of letting them escape.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class DetachedTasks:
    """Tracks detached asyncio tasks until they settle."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule a coroutine without awaiting it."""
        task = asyncio.create_task(coro, name=name)
        self.adopt(task)
        return task

    def adopt(self, task: asyncio.Task[Any]) -> None:
        """Take ownership of an already running task (e.g. a race loser)."""
        if task.done():
            self._on_done(task)
            return
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Detached task %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Detached task %s failed: %s",
                task.get_name(),
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding tasks; stragglers past timeout keep running."""
        if not self._tasks:
            return
        pending = set(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning(
                "%d detached task(s) still running after %.1fs",
                len(still_running),
                timeout or 0.0,
            )
