"""
Cooperative cancellation primitives for termshell.

Nothing here forcibly stops a running handler. ``CancellableTask.cancel``
makes the awaiting side stop waiting; the handler itself only stops when it
observes its ``CancellationToken`` or the context's abort signal.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from ..errors import TaskCancelledError
from ..utils import Subscription


logger = logging.getLogger(__name__)


class AbortSignal:
    """Broadcast channel notified when the owning context aborts."""

    def __init__(self) -> None:
        self._observers: List[Callable[[], Any]] = []

    def subscribe(self, callback: Callable[[], Any]) -> Subscription:
        self._observers.append(callback)
        return Subscription(self._observers, callback)

    def emit(self) -> None:
        for callback in list(self._observers):
            callback()


class CancellationToken:
    """Flag a long-running handler polls (or subscribes to) to stop early."""

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: List[Callable[[], Any]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for callback in list(self._callbacks):
            callback()

    def add_callback(self, callback: Callable[[], Any]) -> Subscription:
        """Run ``callback`` on cancellation, immediately if already cancelled."""
        if self._cancelled:
            callback()
        self._callbacks.append(callback)
        return Subscription(self._callbacks, callback)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise TaskCancelledError("Operation cancelled")


class CancellableTask:
    """
    Runs an awaitable as a task whose caller can stop waiting on it.

    After ``cancel()`` the pending ``execute()`` raises
    ``TaskCancelledError``; the underlying task keeps running until it
    finishes on its own.
    """

    def __init__(self, awaitable: Awaitable[Any]) -> None:
        self._awaitable = awaitable
        self._task: Optional[asyncio.Future] = None
        self._cancel_waiter: Optional[asyncio.Future] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def execute(self) -> Any:
        loop = asyncio.get_running_loop()
        self._cancel_waiter = loop.create_future()
        if self._cancelled:
            self._cancel_waiter.set_result(None)

        self._task = asyncio.ensure_future(self._awaitable)
        self._task.add_done_callback(self._consume_result)

        await asyncio.wait(
            {self._task, self._cancel_waiter},
            return_when=asyncio.FIRST_COMPLETED,
        )

        if self._task.done():
            self._cancel_waiter.cancel()
            return self._task.result()

        raise TaskCancelledError("Task cancelled")

    def cancel(self) -> None:
        self._cancelled = True
        if self._cancel_waiter is not None and not self._cancel_waiter.done():
            self._cancel_waiter.set_result(None)

    def _consume_result(self, task: asyncio.Future) -> None:
        # Detached tasks must not leave an unretrieved exception behind
        if not task.cancelled() and task.exception() is not None and self._cancelled:
            logger.debug(f"Cancelled task finished with error: {task.exception()}")
