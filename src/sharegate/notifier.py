"""ChangeNotifier — fan-out of permission events to live channels.

Every subscriber gets its own bounded queue and a delivery task that
drains it.  ``notify`` only enqueues, so a slow or dead channel can
never hold up the grant mutation that produced the event.  Delivery is
at-most-once: a full queue drops the event and a failed send is logged
and discarded.  Late subscribers see nothing from before they joined.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import TYPE_CHECKING, Any

from .config import ShareConfig
from .events import PermissionEvent

if TYPE_CHECKING:
    from .protocols import Channel

logger = logging.getLogger(__name__)


class _Subscriber:
    __slots__ = ("channel", "queue", "task")

    def __init__(self, channel: Channel, maxsize: int) -> None:
        self.channel = channel
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)
        self.task: asyncio.Task[None] | None = None

    def drain(self) -> None:
        """Discard anything still queued so ``queue.join()`` waiters wake up."""
        while True:
            try:
                self.queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self.queue.task_done()


class ChangeNotifier:
    """Registry of subscriber channels with non-blocking fan-out.

    ``subscribe``, ``unsubscribe`` and ``notify`` must be called from the
    event loop that owns the delivery tasks.  The registry itself is
    lock-guarded and ``notify`` iterates a snapshot, so removal during an
    in-flight fan-out is safe.
    """

    def __init__(self, config: ShareConfig | None = None) -> None:
        self._config = config or ShareConfig()
        self._subscribers: dict[Channel, _Subscriber] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def subscribe(self, channel: Channel) -> None:
        """Register *channel*.  Subscribing twice is a no-op."""
        loop = asyncio.get_running_loop()
        with self._lock:
            if channel in self._subscribers:
                return
            sub = _Subscriber(channel, self._config.subscriber_queue_size)
            self._subscribers[channel] = sub
        sub.task = loop.create_task(self._deliver(sub))
        logger.debug("Subscribed channel %r (%d live)", channel, self.subscriber_count)

    def unsubscribe(self, channel: Channel) -> bool:
        """Remove *channel*.  Returns False if it was not registered."""
        with self._lock:
            sub = self._subscribers.pop(channel, None)
        if sub is None:
            return False
        self._discard(sub)
        logger.debug("Unsubscribed channel %r (%d live)", channel, self.subscriber_count)
        return True

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def is_subscribed(self, channel: Channel) -> bool:
        return channel in self._subscribers

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def notify(self, file_id: int) -> int:
        """Queue a ``permission_update`` for *file_id* on every channel.

        Never blocks and never raises.  Returns how many subscribers the
        event was queued for.
        """
        payload = PermissionEvent(file_id=file_id).to_payload()
        with self._lock:
            snapshot = list(self._subscribers.values())

        queued = 0
        for sub in snapshot:
            try:
                sub.queue.put_nowait(dict(payload))
            except asyncio.QueueFull:
                logger.warning(
                    "Dropped permission_update for file %s: channel %r is not keeping up",
                    file_id,
                    sub.channel,
                )
                continue
            queued += 1
        return queued

    async def flush(self) -> None:
        """Wait until every currently queued event has been delivered or dropped."""
        with self._lock:
            snapshot = list(self._subscribers.values())
        await asyncio.gather(*(sub.queue.join() for sub in snapshot))

    async def close(self) -> None:
        """Unsubscribe everything and wait for the delivery tasks to stop."""
        with self._lock:
            subs = list(self._subscribers.values())
            self._subscribers.clear()
        tasks = [sub.task for sub in subs if sub.task is not None]
        for sub in subs:
            self._discard(sub)
        await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def _deliver(self, sub: _Subscriber) -> None:
        while True:
            payload = await sub.queue.get()
            try:
                await asyncio.wait_for(sub.channel.send(payload), self._config.send_timeout)
            except asyncio.CancelledError:
                sub.queue.task_done()
                raise
            except Exception:
                logger.warning(
                    "Delivery of %s to channel %r failed",
                    payload,
                    sub.channel,
                    exc_info=True,
                )
                if self._config.drop_failed_channels:
                    with self._lock:
                        if self._subscribers.get(sub.channel) is sub:
                            del self._subscribers[sub.channel]
                    sub.queue.task_done()
                    sub.drain()
                    return
            sub.queue.task_done()

    @staticmethod
    def _discard(sub: _Subscriber) -> None:
        task = sub.task
        if task is not None and task is not _current_task():
            task.cancel()
        sub.drain()


def _current_task() -> asyncio.Task[Any] | None:
    with contextlib.suppress(RuntimeError):
        return asyncio.current_task()
    return None
