"""
Auth event listener.

Provider notifications arrive as callbacks, possibly from a thread the
provider owns. The listener turns them into an explicit event channel
(an asyncio queue) drained by a single consumer task, which hands each
event to one handler.
"""

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Optional

from .interfaces import IIdentityProvider, Unsubscribe
from .models import AuthEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[AuthEvent], Awaitable[None]]


class AuthEventListener:
    """
    Lifetime subscription to identity provider session changes.

    start() subscribes once and close() unsubscribes exactly once. The
    consumer task never lets a handler error escape; it logs and moves
    on to the next event.
    """

    def __init__(self, provider: IIdentityProvider, handler: EventHandler):
        self._provider = provider
        self._handler = handler
        self._queue: asyncio.Queue[AuthEvent] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._closed = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Subscribe to the provider and start consuming events."""
        if self._task is not None:
            return
        if self._closed:
            raise RuntimeError("AuthEventListener cannot be restarted after close()")

        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._provider.on_session_change(self._enqueue)
        self._task = asyncio.create_task(self._consume(), name="auth-event-listener")
        logger.debug("Auth event listener started")

    def _enqueue(self, event: AuthEvent) -> None:
        if self._closed or self._loop is None:
            return
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if running_loop is self._loop:
            self._queue.put_nowait(event)
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Loop already closed during shutdown
            logger.debug(f"Dropped auth event {event.provider_event} after loop shutdown")

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._handler(event)
            except Exception:
                logger.exception(f"Auth event handler failed for {event.provider_event}")
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def close(self) -> None:
        """Unsubscribe from the provider and stop the consumer task."""
        if self._closed:
            return
        self._closed = True

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        if self._task is not None:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.debug("Auth event listener closed")
