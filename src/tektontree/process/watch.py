"""Cancellable handle for a long-running watch process."""

from __future__ import annotations

import asyncio

from tektontree.logging import get_logger

log = get_logger("watch")


class WatchHandle:
    """Owns the task that pumps a watch process's output.

    Cancelling the handle cancels the pump task, which kills the process.
    """

    def __init__(self, description: str, task: asyncio.Task[int | None]) -> None:
        self.description = description
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        """Stop the watch. Safe to call more than once."""
        if not self._task.done():
            log.debug("Cancelling watch: %s", self.description)
            self._task.cancel()

    async def wait(self) -> int | None:
        """Wait for the watch to end and return its exit code.

        Returns None if the watch was cancelled or never started.
        """
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return None
            raise

    def __repr__(self) -> str:
        status = "done" if self.done else "running"
        return f"<WatchHandle {self.description!r} {status}>"
