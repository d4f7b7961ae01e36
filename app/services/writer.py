"""Fire-and-forget persistence tasks owned by the running process."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from app.core.logger import LogIcon, logger


class BackgroundWriter:
    """Runs persistence coroutines after the response has been sent.

    Holds a strong reference to every in-flight task so it is not garbage
    collected mid-write, logs failures, and drains on shutdown.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule a coroutine on the running loop."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background write cancelled", icon=LogIcon.WARNING, task=task.get_name())
        elif (error := task.exception()) is not None:
            logger.error("Background write failed", icon=LogIcon.ERROR, task=task.get_name(), error=str(error))
        else:
            logger.info("Background write completed", icon=LogIcon.SUCCESS, task=task.get_name())

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding writes; cancel whatever is left after ``timeout``."""
        if not self._tasks:
            return

        logger.info("Draining background writes", icon=LogIcon.PROCESSING, pending=len(self._tasks))
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.wait(still_running)
