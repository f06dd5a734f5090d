"""Per-screen task ownership and single-request-in-flight bookkeeping.

Everything here runs on one asyncio event loop. A synchronous method
cannot be interleaved with another coroutine, so "check the slot" and
"take the slot" inside ``RequestSlot.try_acquire`` happen as one step.
"""

import asyncio
import logging
from collections.abc import Coroutine

logger = logging.getLogger(__name__)


class ScopeClosedError(RuntimeError):
    pass


class CancelScope:
    """Owns the tasks started on behalf of one screen.

    Closing the scope cancels whatever is still running. Components check
    ``closed`` before applying a response, so a completion that lands
    after teardown changes nothing.
    """

    def __init__(self, name: str = "screen"):
        self.name = name
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        """Schedule ``coro`` on the running loop, bound to this scope."""
        if self._closed:
            coro.close()
            raise ScopeClosedError(f"Scope {self.name!r} is closed")
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._tasks:
            logger.debug(
                "Cancelling %d pending task(s) in scope %s", len(self._tasks), self.name
            )
        for task in list(self._tasks):
            task.cancel()

    async def aclose(self) -> None:
        """Close the scope and wait for cancelled tasks to unwind."""
        tasks = list(self._tasks)
        self.close()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


class RequestSlot:
    """At most one request in flight; acquiring is a single step."""

    def __init__(self):
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def try_acquire(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def release(self) -> None:
        self._busy = False
